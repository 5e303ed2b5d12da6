"""User-facing message texts."""

from __future__ import annotations

from src.commands.replies import Button, ButtonsReply
from src.models import CreatedProduct, Product

CURRENCY = "₪"
STOCK_WARNING = " ⚠️"
MENU_FOOTER = "Shop Inventory Bot"

_BACK_TO_MENU = 'Reply "menu" for main menu.'
_CANCEL_HINT = 'Send "cancel" to abort.'

MENU_BUTTONS = (
    Button(id="list", label="List products"),
    Button(id="add", label="Add product"),
    Button(id="help", label="Help"),
)


def format_menu_text() -> str:
    return "\n".join([
        "Welcome to Shop Inventory Bot!",
        "",
        "Choose an option:",
        "1. List products",
        "2. Add product",
        "3. Help",
        "",
        "Reply with the number of your choice.",
    ])


def format_menu() -> ButtonsReply:
    return ButtonsReply(body=format_menu_text(), buttons=MENU_BUTTONS, footer=MENU_FOOTER)


def format_unknown_command() -> ButtonsReply:
    return ButtonsReply(
        body="I didn't understand that.\n\n" + format_menu_text(),
        buttons=MENU_BUTTONS,
        footer=MENU_FOOTER,
    )


def _product_line(name: str, price: str, stock: int | None) -> str:
    return f"{name} — {CURRENCY}{price} — Stock: {stock if stock is not None else 0}"


def format_product_list(products: list[Product]) -> str:
    if not products:
        return "No products found. Send 2 to add your first product."

    lines = []
    for i, product in enumerate(products, start=1):
        warning = STOCK_WARNING if not product.stock_quantity else ""
        lines.append(
            f"{i}. {_product_line(product.name, product.price, product.stock_quantity)}{warning}"
        )
    header = f"📦 Your Products ({len(products)}):\n"
    return f"{header}\n" + "\n".join(lines) + f"\n\n{_BACK_TO_MENU}"


def format_list_error(error_message: str) -> str:
    return f"❌ Error fetching products: {error_message}\n\n{_BACK_TO_MENU}"


def format_product_created(product: CreatedProduct) -> str:
    line = _product_line(product.name, product.price, product.stock_quantity)
    return f"✅ Product created!\n{line}\n\n{_BACK_TO_MENU}"


def format_product_create_error(error_message: str) -> str:
    return (
        f"❌ Failed to create product: {error_message}\n\n"
        'Send 2 to try again, or "menu" for main menu.'
    )


def format_ask_name() -> str:
    return f"What is the product name?\n\n{_CANCEL_HINT}"


def format_ask_price() -> str:
    return f"What is the price?\n\n{_CANCEL_HINT}"


def format_ask_stock() -> str:
    return f"How many in stock?\n\n{_CANCEL_HINT}"


def format_cancelled() -> str:
    return f"Product creation cancelled.\n\n{_BACK_TO_MENU}"


def format_invalid_price() -> str:
    return f"Invalid price. Please enter a number (e.g. 29.99).\n\n{_CANCEL_HINT}"


def format_invalid_stock() -> str:
    return f"Invalid stock. Please enter a whole number (e.g. 50).\n\n{_CANCEL_HINT}"


def format_unregistered_sender() -> str:
    return (
        "👋 Hi! This number runs Shop Inventory Bot, a private assistant for "
        "its shop owner.\n\n"
        "Want to manage your own product catalog from WhatsApp? Install the "
        "Shop Inventory plugin on your store and connect your phone number "
        "to get started."
    )
