from __future__ import annotations

import argparse
import sys
from typing import Callable, NoReturn, Optional, Sequence

from ..calculator import calculate, parse_request
from ..config import llm_configured, load_llm_settings
from ..errors import (
    AssistantAuthError,
    AssistantConnectionError,
    AssistantError,
    AssistantRateLimitError,
    AssistantTimeoutError,
    CalculationError,
    CLIError,
    ConfigurationError,
    InvalidInputError,
    StorageUnavailableError,
)
from ..logging import get_logger
from ..productdb import storage_available
from .products import Confirm, ProductCommands, write_error

LOG = get_logger("cli-main")

CALC_HINT = "For direct calculations, use: pocket-knife calc <amount> <percentage>"
PRODUCT_HINT = "For direct product commands, use: pocket-knife list-products"
KEY_HINT = "Get a free key at: https://makersuite.google.com/app/apikey"

EPILOG = """\
examples:
  pocket-knife calc 200 15                      # => 30.00
  pocket-knife ask "What is 20% of 100?"
  pocket-knife ask-product "Show me products under $10"
  pocket-knife store-product "Coffee" 12.99
  pocket-knife list-products
  pocket-knife get-product "coffee"             # case-insensitive
  pocket-knife update-product "Coffee" 15.99
  pocket-knife delete-product "Coffee"          # asks for confirmation

notes:
  'calc' percentages are whole numbers without the % symbol.
  'ask' and 'ask-product' need GEMINI_API_KEY in the environment or a .env file.
  Products are stored in ~/.pocket-knife/products.db (override with POCKET_KNIFE_HOME).
"""


class _Parser(argparse.ArgumentParser):
    """ArgumentParser that reports usage errors with exit code 1."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        write_error(sys.stderr, message, "Run 'pocket-knife --help' for usage.")
        self.exit(1)


class _Context:
    """Objects shared by all handlers for one invocation."""

    def __init__(self, confirm: Optional[Confirm], db_path: Optional[str]) -> None:
        self.confirm = confirm
        self.db_path = db_path


def _report_storage_unavailable() -> int:
    write_error(
        sys.stderr,
        "Storage features are not available",
        "The sqlite3 module could not be loaded by this Python interpreter.",
        "",
        "For calculations without storage, use:",
        "  pocket-knife calc <amount> <percentage>",
    )
    return 1


def _with_products(ctx: _Context, action: Callable[[ProductCommands], int]) -> int:
    if not storage_available():
        raise StorageUnavailableError("sqlite3 driver not available")
    from ..productdb.store import ProductStore

    with ProductStore.open(ctx.db_path) as store:
        return action(ProductCommands(store, confirm=ctx.confirm))


def _handle_calc(ns: argparse.Namespace, _: _Context) -> int:
    usage = "Usage: pocket-knife calc <amount> <percentage>"
    try:
        if ns.amount is None or ns.percentage is None:
            raise CLIError("Missing arguments.")
        result = calculate(parse_request(ns.amount, ns.percentage))
    except CLIError as e:
        write_error(sys.stderr, str(e), usage)
        return 1
    except InvalidInputError as e:
        write_error(sys.stderr, str(e), usage)
        return 2
    except CalculationError as e:
        write_error(sys.stderr, str(e), usage)
        return 1
    print(result)
    return 0


def _query_text(ns: argparse.Namespace) -> str:
    return " ".join(ns.query).strip()


def _handle_ask(ns: argparse.Namespace, _: _Context) -> int:
    if not llm_configured():
        write_error(
            sys.stderr,
            "No API key configured. Set GEMINI_API_KEY in .env file or environment variable.",
            KEY_HINT,
            CALC_HINT,
        )
        return 1
    query = _query_text(ns)
    if not query:
        write_error(sys.stderr, 'Missing query. Usage: pocket-knife ask "What is 20% of 100?"', CALC_HINT)
        return 1

    from ..assistant.client import Assistant
    from ..assistant.tools import PercentageCalculatorTool

    try:
        assistant = Assistant(load_llm_settings(), [PercentageCalculatorTool()])
        try:
            print(assistant.ask(query))
        finally:
            assistant.close()
    except ConfigurationError as e:
        write_error(sys.stderr, str(e), KEY_HINT, CALC_HINT)
        return 1
    except AssistantAuthError as e:
        write_error(sys.stderr, f"Authentication failed: {e}", "Please verify your GEMINI_API_KEY is correct.", KEY_HINT, CALC_HINT)
        return 1
    except AssistantConnectionError as e:
        write_error(sys.stderr, f"Network error: {e}", "Please check your internet connection and try again.", CALC_HINT)
        return 2
    except AssistantTimeoutError as e:
        write_error(sys.stderr, f"Request timeout: {e}", "Please try again later.", CALC_HINT)
        return 2
    except AssistantRateLimitError as e:
        write_error(sys.stderr, f"Rate limit exceeded: {e}", "Please wait a moment and try again.", CALC_HINT)
        return 2
    except AssistantError as e:
        write_error(sys.stderr, f"LLM error: {e}", "An unexpected error occurred while processing your request.", CALC_HINT)
        return 2
    return 0


def _handle_ask_product(ns: argparse.Namespace, ctx: _Context) -> int:
    if not storage_available():
        raise StorageUnavailableError("sqlite3 driver not available")
    if not llm_configured():
        write_error(
            sys.stderr,
            "No API key configured. Set GEMINI_API_KEY in .env file or environment variable.",
            KEY_HINT,
            'For direct product commands, use: pocket-knife get-product "<name>"',
        )
        return 1
    query = _query_text(ns)
    if not query:
        write_error(
            sys.stderr,
            'Missing query. Usage: pocket-knife ask-product "your question about products"',
            "Examples:",
            '  pocket-knife ask-product "Is there a product called banana?"',
            '  pocket-knife ask-product "Show me products under $10"',
            PRODUCT_HINT,
        )
        return 1

    from ..assistant.client import Assistant
    from ..assistant.tools import ProductQueryTool
    from ..productdb.store import ProductStore

    with ProductStore.open(ctx.db_path) as store:
        try:
            assistant = Assistant(load_llm_settings(), [ProductQueryTool(store)])
            try:
                print(assistant.ask(query))
            finally:
                assistant.close()
        except ConfigurationError as e:
            write_error(sys.stderr, str(e), KEY_HINT, PRODUCT_HINT)
            return 1
        except AssistantConnectionError as e:
            write_error(sys.stderr, f"Network error: {e}", "Please check your internet connection and try again.", PRODUCT_HINT)
            return 1
        except AssistantError as e:
            write_error(sys.stderr, f"Unexpected error occurred: {e}", PRODUCT_HINT)
            return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = _Parser(
        prog="pocket-knife",
        description="Pocket Knife - command-line percentage calculator & product storage.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    calc = subparsers.add_parser("calc", help="Calculate a percentage of an amount.")
    calc.add_argument("amount", nargs="?", help="Any numeric value (integer or decimal)")
    calc.add_argument("percentage", nargs="?", help="Whole number only (e.g., 15 for 15%%)")
    calc.set_defaults(handler=_handle_calc)

    ask = subparsers.add_parser("ask", help="Ask percentage questions in natural language.")
    ask.add_argument("query", nargs="*")
    ask.set_defaults(handler=_handle_ask)

    ask_product = subparsers.add_parser("ask-product", help="Query stored products in natural language.")
    ask_product.add_argument("query", nargs="*")
    ask_product.set_defaults(handler=_handle_ask_product)

    store = subparsers.add_parser("store-product", help="Store a product with name and price.")
    store.add_argument("name", nargs="?", help="Product name (quote it if it contains spaces)")
    store.add_argument("price", nargs="?", help="Non-negative price")
    store.set_defaults(handler=lambda ns, ctx: _with_products(ctx, lambda c: c.store_product(ns.name, ns.price)))

    lst = subparsers.add_parser("list-products", help="List all stored products in a table.")
    lst.set_defaults(handler=lambda ns, ctx: _with_products(ctx, lambda c: c.list_products()))

    get = subparsers.add_parser("get-product", help="Show details of one product.")
    get.add_argument("name", nargs="?", help="Product name (case-insensitive)")
    get.set_defaults(handler=lambda ns, ctx: _with_products(ctx, lambda c: c.get_product(ns.name)))

    update = subparsers.add_parser("update-product", help="Change the price of an existing product.")
    update.add_argument("name", nargs="?", help="Existing product name (case-insensitive)")
    update.add_argument("new_price", nargs="?", help="New non-negative price")
    update.set_defaults(handler=lambda ns, ctx: _with_products(ctx, lambda c: c.update_product(ns.name, ns.new_price)))

    delete = subparsers.add_parser("delete-product", help="Delete a product after confirmation.")
    delete.add_argument("name", nargs="?", help="Existing product name (case-insensitive)")
    delete.set_defaults(handler=lambda ns, ctx: _with_products(ctx, lambda c: c.delete_product(ns.name)))

    return parser


def main(
    argv: Sequence[str] | None = None,
    *,
    confirm: Optional[Confirm] = None,
    db_path: Optional[str] = None,
) -> int:
    provided = list(argv) if argv is not None else sys.argv[1:]
    LOG.info(f"CLI invoked with arguments: {provided}")

    args = build_parser().parse_args(provided)
    ctx = _Context(confirm=confirm, db_path=db_path)
    try:
        code = args.handler(args, ctx)
    except StorageUnavailableError:
        code = _report_storage_unavailable()
    except KeyboardInterrupt:
        print(file=sys.stderr)
        code = 1
    except Exception as e:
        LOG.debug("Unhandled error in '%s'", args.command, exc_info=True)
        write_error(sys.stderr, "An unexpected error occurred", f"Details: {e}")
        code = 1
    LOG.info(f"Subcommand '{args.command}' finished with exit code {code}.")
    return code


if __name__ == "__main__":
    sys.exit(main())
