# interactive catalog CLI with autocomplete
import os
import sys
from datetime import datetime
from typing import List, Dict, Any, Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import IntPrompt, Confirm, Prompt
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich import box

from prompt_toolkit import prompt
from prompt_toolkit.completion import WordCompleter, PathCompleter
from prompt_toolkit.styles import Style as PromptStyle

from sdk.pycatalog import CatalogClient
import requests

console = Console()
c = CatalogClient(
    base_url=os.getenv("CATALOG_URL", "http://127.0.0.1:8085"),
    token=os.getenv("CATALOG_TOKEN"),
)

# Global state for status messages and caching
status_message = "Ready"
product_cache: List[Dict[str, Any]] = []

custom_style = PromptStyle.from_dict({
    'completion-menu.completion': 'bg:#008888 #ffffff',
    'completion-menu.completion.current': 'bg:#00aaaa #000000',
    'scrollbar.background': 'bg:#88aaaa',
    'scrollbar.button': 'bg:#222222',
})


# ---------------------------
# Display helpers
# ---------------------------
def show_products(products: List[Dict[str, Any]]):
    if not products:
        console.print("[italic yellow]No products found[/italic yellow]")
        return

    table = Table(
        title="📦 Product Catalog",
        box=box.ROUNDED,
        header_style="bold cyan",
        title_style="bold magenta",
        show_lines=True
    )
    table.add_column("ID", style="dim", width=6)
    table.add_column("Name", style="bold", width=20)
    table.add_column("Description", width=30)
    table.add_column("Price", justify="right", width=10)
    table.add_column("Qty", justify="right", width=8)
    table.add_column("Image", width=28)

    for p in products:
        table.add_row(
            str(p.get("id", "N/A")),
            p.get("name", "N/A"),
            p.get("description", ""),
            f"{float(p.get('price', 0)):.2f}",
            str(p.get("quantity", 0)),
            p.get("imageUrl", "N/A")
        )
    console.print(table)


def show_status(message: str, is_success: bool = True):
    style = "green" if is_success else "red"
    return Panel.fit(f"[{style}]{message}[/{style}]", title="Status")


# ---------------------------
# API wrapper with exception handling
# ---------------------------
def try_api(fn, *args, success_msg: Optional[str] = None, **kwargs):
    """
    Calls fn(*args, **kwargs) behind a spinner and returns its result.
    Errors update status_message and yield None.
    """
    global status_message
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
        ) as progress:
            progress.add_task(description="Processing...", total=None)
            result = fn(*args, **kwargs)

        if success_msg:
            status_message = success_msg
            console.print(show_status(success_msg, True))
        return result
    except requests.HTTPError as e:
        # server errors are plain text messages
        status_message = f"Error: HTTP {e.response.status_code}: {e.response.text}"
    except Exception as e:
        status_message = f"Error: {e}"
    console.print(show_status(status_message, False))
    return None


# ---------------------------
# Autocompletion helpers
# ---------------------------
def get_product_completer():
    global product_cache
    if not product_cache:
        product_cache = try_api(c.list_products) or []
    return WordCompleter([str(p.get("id")) for p in product_cache], ignore_case=True)


def refresh_cache():
    global product_cache
    product_cache = try_api(c.list_products) or []


def create_header():
    header = Table(show_header=False, box=box.ROUNDED)
    header.add_column("left", width=30)
    header.add_column("center", width=40)
    header.add_column("right", width=30)

    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    header.add_row(
        "🛍️ PyCatalog SDK",
        "[bold blue]Product Catalog Admin CLI[/bold blue]",
        f"[dim]{now}[/dim]"
    )
    return Panel(header, style="bold blue")


def prompt_with_autocomplete(message: str, completer=None, default: str = ""):
    return prompt(f"{message} ", completer=completer, style=custom_style, default=default)


def ask_float(message: str, default: float = 10.0) -> float:
    while True:
        raw = Prompt.ask(message, default=str(default))
        try:
            return float(raw)
        except ValueError:
            console.print("[red]Please enter a valid number.[/red]")


def ask_optional(message: str) -> Optional[str]:
    # empty answer leaves the field unchanged
    raw = Prompt.ask(f"{message} [dim](blank = keep)[/dim]", default="")
    return raw or None


# ---------------------------
# Main menu
# ---------------------------
def menu():
    global status_message

    console.clear()
    console.print(create_header())
    refresh_cache()

    while True:
        if status_message:
            console.print(show_status(status_message, "Error" not in status_message))

        menu_table = Table.grid(padding=(0, 2))
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)

        options = [
            ("1", "📦 List products", "4", "✏️ Update product"),
            ("2", "ℹ️ Get product by ID", "5", "🗑️ Delete product"),
            ("3", "➕ Add product", "q", "👋 Quit"),
        ]
        for row in options:
            menu_table.add_row(*row)
        console.print(Panel(menu_table, title="📋 Menu", border_style="yellow"))

        choice = prompt_with_autocomplete(
            "\nChoose an option",
            completer=WordCompleter(["1", "2", "3", "4", "5", "q", "quit", "exit"])
        ).strip()

        if choice == "1":
            products = try_api(c.list_products, success_msg="Products loaded successfully")
            if products is not None:
                show_products(products)

        elif choice == "2":
            pid = prompt_with_autocomplete("Enter product ID", completer=get_product_completer())
            product = try_api(c.get_product, pid, success_msg=f"Product {pid} details loaded")
            if product:
                show_products([product])
                if Confirm.ask("Save image to disk?", default=False):
                    dest = prompt_with_autocomplete("Destination", completer=PathCompleter(), default=".")
                    saved = try_api(c.save_image, product, dest)
                    if saved:
                        console.print(f"[green]Image written to {saved}[/green]")

        elif choice == "3":
            name = prompt_with_autocomplete("Enter product name")
            description = prompt_with_autocomplete("Enter description")
            price = ask_float("💰 Price", default=10.0)
            qty = IntPrompt.ask("📦 Quantity", default=1)
            image = prompt_with_autocomplete("🖼️ Image path", completer=PathCompleter())
            resp = try_api(
                c.add_product, name, description, price, qty, image,
                success_msg=f"Product '{name}' created"
            )
            if resp:
                show_products([resp])
                refresh_cache()

        elif choice == "4":
            pid = prompt_with_autocomplete("Enter product ID", completer=get_product_completer())
            name = ask_optional("Name")
            description = ask_optional("Description")
            price = ask_optional("Price")
            qty = ask_optional("Quantity")
            image = prompt_with_autocomplete("🖼️ New image path (blank = keep)", completer=PathCompleter()) or None
            resp = try_api(
                c.update_product, pid, name, description, price, qty, image,
                success_msg=f"Product {pid} updated"
            )
            if resp:
                show_products([resp])
                refresh_cache()

        elif choice == "5":
            pid = prompt_with_autocomplete("Enter product ID", completer=get_product_completer())
            if Confirm.ask(f"[red]Delete product {pid}?[/red]"):
                resp = try_api(c.delete_product, int(pid) if pid.isdigit() else pid)
                if resp:
                    status_message = resp
                    refresh_cache()

        elif choice.lower() in ("q", "quit", "exit"):
            if Confirm.ask("Are you sure you want to quit?"):
                console.print(Panel.fit("[bold green]Thank you for using PyCatalog! 👋[/bold green]", title="Goodbye"))
                sys.exit(0)

        console.print()
        console.rule(style="dim")


if __name__ == "__main__":
    try:
        menu()
    except KeyboardInterrupt:
        console.print("\n\n[bold red]Interrupted by user[/bold red]")
        sys.exit(1)
    except Exception as e:
        console.print(f"\n\n[bold red]Unexpected error: {e}[/bold red]")
        sys.exit(1)
