"""Product management CLI commands."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from src.stockroom.core.services import ProductCatalog, populate_sample_data
from src.stockroom.core.storage import StorageError, build_product_storage, select_backend
from src.stockroom.entities.product import Product, ProductCreate, ProductUpdate

T = TypeVar("T")

console = Console()

app = typer.Typer(
    help="📦 Stockroom - track stocked products",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def run_with_catalog(operation: Callable[[ProductCatalog], Awaitable[T]]) -> T:
    """Build the storage, initialize it, run ``operation`` and close it again.

    Storage and validation errors are reported and turned into exit code 1.
    """

    async def _main() -> T:
        storage = build_product_storage()
        try:
            await storage.init()
            return await operation(ProductCatalog(storage))
        finally:
            await storage.close()

    try:
        return asyncio.run(_main())
    except (StorageError, ValueError) as e:
        # pydantic's ValidationError is a ValueError
        console.print(f"[red]❌ {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e


def render_products(products: list[Product], title: str) -> None:
    if not products:
        console.print("[yellow]No products found[/yellow]")
        return

    table = Table(title=title)
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Name", style="green")
    table.add_column("Qty", justify="right")
    table.add_column("Price", justify="right")
    table.add_column("Image", style="blue")
    table.add_column("Updated", style="magenta")

    for product in products:
        quantity = str(product.quantity) if product.quantity else "[red]0[/red]"
        table.add_row(
            str(product.id),
            product.name,
            quantity,
            f"{product.price:.2f}",
            product.image_uri or "",
            product.updated_at.strftime("%Y-%m-%d %H:%M:%S"),
        )

    console.print(table)
    console.print(f"\n[green]{len(products)} product(s)[/green]")


def render_product(product: Product) -> None:
    console.print(f"[cyan]#{product.id}[/cyan] [green]{product.name}[/green]")
    console.print(f"  quantity: {product.quantity}")
    console.print(f"  price:    {product.price:.2f}")
    console.print(f"  image:    {product.image_uri or '-'}")
    console.print(f"  created:  {product.created_at.isoformat()}")
    console.print(f"  updated:  {product.updated_at.isoformat()}")


@app.command("init")
def init_store() -> None:
    """Create the product store if it does not exist yet."""

    async def _describe(catalog: ProductCatalog) -> tuple[str, int]:
        return catalog.storage.backend.value, len(await catalog.load())

    backend, count = run_with_catalog(_describe)
    console.print(f"[green]✅ {backend} store ready ({count} products)[/green]")


@app.command("backend")
def show_backend() -> None:
    """Show which storage backend this runtime selects."""
    console.print(select_backend().value)


@app.command("list")
def list_products() -> None:
    """List all products, most recently updated first."""
    products = run_with_catalog(lambda catalog: catalog.load())
    render_products(products, "Products")


@app.command("show")
def show_product(product_id: int = typer.Argument(..., help="Product ID")) -> None:
    """Show a single product."""
    product = run_with_catalog(lambda catalog: catalog.get(product_id))
    if product is None:
        console.print(f"[red]❌ Product {product_id} not found[/red]")
        raise typer.Exit(code=1)
    render_product(product)


@app.command("add")
def add_product(
    name: str = typer.Option(..., "--name", "-n", help="Product name"),
    quantity: int = typer.Option(0, "--quantity", "-q", help="Units in stock"),
    price: float = typer.Option(..., "--price", "-p", help="Unit price"),
    image: str | None = typer.Option(None, "--image", "-i", help="Image URI"),
) -> None:
    """Add a new product."""

    async def _create(catalog: ProductCatalog) -> Product:
        data = ProductCreate(name=name, quantity=quantity, price=price, image_uri=image)
        return await catalog.create(data)

    product = run_with_catalog(_create)
    console.print(f"[green]✅ Created product {product.id}[/green]")
    render_product(product)


@app.command("edit")
def edit_product(
    product_id: int = typer.Argument(..., help="Product ID"),
    name: str | None = typer.Option(None, "--name", "-n", help="New name"),
    quantity: int | None = typer.Option(None, "--quantity", "-q", help="New quantity"),
    price: float | None = typer.Option(None, "--price", "-p", help="New price"),
    image: str | None = typer.Option(None, "--image", "-i", help="New image URI"),
    clear_image: bool = typer.Option(False, "--clear-image", help="Remove the image"),
) -> None:
    """Change some fields of a product; omitted fields stay as they are."""
    if image is not None and clear_image:
        console.print("[red]❌ --image and --clear-image are mutually exclusive[/red]")
        raise typer.Exit(code=2)

    changes: dict = {}
    if name is not None:
        changes["name"] = name
    if quantity is not None:
        changes["quantity"] = quantity
    if price is not None:
        changes["price"] = price
    if image is not None:
        changes["image_uri"] = image
    if clear_image:
        changes["image_uri"] = None

    async def _update(catalog: ProductCatalog) -> Product:
        return await catalog.update(ProductUpdate(id=product_id, **changes))

    product = run_with_catalog(_update)
    console.print(f"[green]✅ Updated product {product.id}[/green]")
    render_product(product)


@app.command("delete")
def delete_product(product_id: int = typer.Argument(..., help="Product ID")) -> None:
    """Delete a product."""
    deleted = run_with_catalog(lambda catalog: catalog.delete(product_id))
    if not deleted:
        console.print(f"[red]❌ Product {product_id} not found[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]✅ Deleted product {product_id}[/green]")


@app.command("search")
def search_products(query: str = typer.Argument("", help="Text to look for in names")) -> None:
    """Find products whose name contains QUERY (case-insensitive)."""
    products = run_with_catalog(lambda catalog: catalog.search(query))
    render_products(products, f"Products matching {query!r}" if query.strip() else "Products")


@app.command("seed")
def seed_products() -> None:
    """Fill an empty store with sample products."""
    created = run_with_catalog(lambda catalog: populate_sample_data(catalog.storage))
    if created:
        console.print(f"[green]✅ Added {created} sample products[/green]")
    else:
        console.print("[yellow]Store already has products; nothing added[/yellow]")
