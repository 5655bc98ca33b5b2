"""Command-line interface for bookshare.

Built with Typer for commands and Rich for output.
"""

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from .config import get_config
from .db import get_db
from .errors import BookshareError
from .guard import Actor
from .logging_setup import configure_logging
from .service import BookNetwork

# Create the main app
app = typer.Typer(
    name="bookshare",
    help="Lend, borrow and rate books with other members.",
    no_args_is_help=True,
)

# Create sub-apps for command groups
lending_app = typer.Typer(help="Borrow, return and approve returns of books.")
app.add_typer(lending_app, name="lending")

feedback_app = typer.Typer(help="Rate books and read their feedback.")
app.add_typer(feedback_app, name="feedback")

# Rich console for pretty output
console = Console()

ACTOR_HELP = "Member acting (defaults to BOOKSHARE_ACTOR)"


# ============================================================================
# Helper Functions
# ============================================================================


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[dim]{message}[/dim]")


def get_network() -> BookNetwork:
    return BookNetwork(get_db())


def resolve_actor(actor_id: Optional[str]) -> Actor:
    """Actor from the --as option or the configured default."""
    actor_id = (actor_id or get_config().actor_id or "").strip()
    if not actor_id:
        print_error("No member given. Use --as or set BOOKSHARE_ACTOR.")
        raise typer.Exit(1)
    return Actor(actor_id)


def fail(error: BookshareError) -> None:
    """Report a failed operation and exit."""
    print_error(error.description)
    raise typer.Exit(1)


def format_book_table(books: list, title: str = "Books") -> Table:
    """Create a rich table for displaying books."""
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="cyan", no_wrap=False, max_width=40)
    table.add_column("Author", style="green", max_width=25)
    table.add_column("Rating", justify="center")
    table.add_column("Flags")

    for book in books:
        flags = []
        if book.shareable:
            flags.append("[green]shareable[/green]")
        if book.archived:
            flags.append("[red]archived[/red]")
        table.add_row(
            book.id,
            book.title,
            book.author_name,
            f"{book.rate:.1f}",
            " ".join(flags) or "-",
        )

    return table


def format_loan_table(loans: list, title: str) -> Table:
    """Create a rich table for displaying loans."""
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Book", style="dim")
    table.add_column("Title", style="cyan", max_width=40)
    table.add_column("Borrower")
    table.add_column("Borrowed")
    table.add_column("Status")

    styles = {
        "open": "[yellow]open[/yellow]",
        "returned_pending": "[blue]returned, awaiting approval[/blue]",
        "closed": "[dim]closed[/dim]",
    }
    for loan in loans:
        table.add_row(
            loan.id,
            loan.title,
            loan.borrower_id,
            loan.borrowed_at[:10],
            styles[loan.status.value],
        )

    return table


def print_page_footer(page) -> None:
    if page.total_pages > 1:
        print_info(f"Page {page.number + 1} of {page.total_pages} ({page.total_elements} total)")


@app.callback()
def main_callback(
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Logging level (defaults to BOOKSHARE_LOG_LEVEL)"
    ),
) -> None:
    """Lend, borrow and rate books with other members."""
    configure_logging(log_level or get_config().log_level)


# ============================================================================
# Catalog Commands
# ============================================================================


@app.command()
def add(
    title: str = typer.Argument(..., help="Book title"),
    author: str = typer.Option(..., "--author", "-a", help="Author name"),
    isbn: Optional[str] = typer.Option(None, "--isbn", "-i", help="ISBN"),
    synopsis: Optional[str] = typer.Option(None, "--synopsis", help="Short synopsis"),
    cover: Optional[str] = typer.Option(None, "--cover", help="Stored cover reference"),
    shareable: bool = typer.Option(False, "--shareable", "-s", help="Allow others to borrow it"),
    actor_id: Optional[str] = typer.Option(None, "--as", help=ACTOR_HELP),
) -> None:
    """List a new book you own."""
    actor = resolve_actor(actor_id)
    try:
        book_id = get_network().create_book(
            actor,
            title=title,
            author_name=author,
            isbn=isbn,
            synopsis=synopsis,
            cover=cover,
            shareable=shareable,
        )
    except BookshareError as e:
        fail(e)
    print_success(f"Book added: {book_id}")


@app.command()
def show(
    book_id: str = typer.Argument(..., help="Book ID"),
) -> None:
    """Show a book with its rating and availability."""
    try:
        book = get_network().get_book(book_id)
    except BookshareError as e:
        fail(e)

    console.print(f"[bold cyan]{book.title}[/bold cyan] by [green]{book.author_name}[/green]")
    if book.isbn:
        console.print(f"ISBN: {book.isbn}")
    if book.synopsis:
        console.print(book.synopsis)
    console.print(f"Owner: {book.owner_id}")
    console.print(f"Rating: {book.rate:.1f}")
    console.print(f"Shareable: {'yes' if book.shareable else 'no'}")
    console.print(f"Archived: {'yes' if book.archived else 'no'}")
    console.print(f"Available: {'yes' if book.available else 'no'}")


@app.command("list")
def list_books(
    mine: bool = typer.Option(False, "--mine", "-m", help="Show only your own books"),
    page: int = typer.Option(0, "--page", "-p", help="Page number, starting at 0"),
    size: Optional[int] = typer.Option(None, "--size", help="Page size"),
    actor_id: Optional[str] = typer.Option(None, "--as", help=ACTOR_HELP),
) -> None:
    """List books you can borrow, or your own with --mine."""
    actor = resolve_actor(actor_id)
    if size is None:
        size = get_config().default_page_size
    network = get_network()
    try:
        if mine:
            result = network.list_owned_books(page, size, actor)
        else:
            result = network.list_books(page, size, actor)
    except BookshareError as e:
        fail(e)

    if not result.content:
        console.print("[dim]No books found[/dim]")
        return

    console.print(format_book_table(result.content, "My Books" if mine else "Books"))
    print_page_footer(result)


@app.command()
def share(
    book_id: str = typer.Argument(..., help="Book ID"),
    actor_id: Optional[str] = typer.Option(None, "--as", help=ACTOR_HELP),
) -> None:
    """Toggle whether others may borrow your book."""
    actor = resolve_actor(actor_id)
    try:
        value = get_network().set_shareable(book_id, actor)
    except BookshareError as e:
        fail(e)
    print_success(f"Book is now {'shareable' if value else 'not shareable'}")


@app.command()
def archive(
    book_id: str = typer.Argument(..., help="Book ID"),
    actor_id: Optional[str] = typer.Option(None, "--as", help=ACTOR_HELP),
) -> None:
    """Toggle whether your book is archived."""
    actor = resolve_actor(actor_id)
    try:
        value = get_network().set_archived(book_id, actor)
    except BookshareError as e:
        fail(e)
    print_success(f"Book is now {'archived' if value else 'unarchived'}")


@app.command()
def cover(
    book_id: str = typer.Argument(..., help="Book ID"),
    ref: str = typer.Argument(..., help="Stored cover reference"),
    actor_id: Optional[str] = typer.Option(None, "--as", help=ACTOR_HELP),
) -> None:
    """Attach a stored cover to your book."""
    actor = resolve_actor(actor_id)
    try:
        get_network().set_cover(book_id, actor, ref)
    except BookshareError as e:
        fail(e)
    print_success("Cover updated")


# ============================================================================
# Lending Commands
# ============================================================================


@lending_app.command("borrow")
def lending_borrow(
    book_id: str = typer.Argument(..., help="Book ID to borrow"),
    actor_id: Optional[str] = typer.Option(None, "--as", help=ACTOR_HELP),
) -> None:
    """Borrow a book from its owner."""
    actor = resolve_actor(actor_id)
    try:
        loan_id = get_network().borrow_book(book_id, actor)
    except BookshareError as e:
        fail(e)
    print_success(f"Book borrowed (loan {loan_id})")


@lending_app.command("return")
def lending_return(
    book_id: str = typer.Argument(..., help="Book ID to return"),
    actor_id: Optional[str] = typer.Option(None, "--as", help=ACTOR_HELP),
) -> None:
    """Return a borrowed book. The owner must approve it."""
    actor = resolve_actor(actor_id)
    try:
        get_network().return_book(book_id, actor)
    except BookshareError as e:
        fail(e)
    print_success("Book returned, awaiting owner approval")


@lending_app.command("approve")
def lending_approve(
    book_id: str = typer.Argument(..., help="Book ID whose return to approve"),
    actor_id: Optional[str] = typer.Option(None, "--as", help=ACTOR_HELP),
) -> None:
    """Approve the return of your book."""
    actor = resolve_actor(actor_id)
    try:
        get_network().approve_return(book_id, actor)
    except BookshareError as e:
        fail(e)
    print_success("Return approved")


@lending_app.command("borrowed")
def lending_borrowed(
    page: int = typer.Option(0, "--page", "-p", help="Page number, starting at 0"),
    size: Optional[int] = typer.Option(None, "--size", help="Page size"),
    actor_id: Optional[str] = typer.Option(None, "--as", help=ACTOR_HELP),
) -> None:
    """List books you have borrowed."""
    actor = resolve_actor(actor_id)
    if size is None:
        size = get_config().default_page_size
    try:
        result = get_network().list_borrowed(page, size, actor)
    except BookshareError as e:
        fail(e)

    if not result.content:
        console.print("[dim]No loans found[/dim]")
        return

    console.print(format_loan_table(result.content, "Borrowed Books"))
    print_page_footer(result)


@lending_app.command("lent")
def lending_lent(
    page: int = typer.Option(0, "--page", "-p", help="Page number, starting at 0"),
    size: Optional[int] = typer.Option(None, "--size", help="Page size"),
    actor_id: Optional[str] = typer.Option(None, "--as", help=ACTOR_HELP),
) -> None:
    """List loans of your books, including returns awaiting approval."""
    actor = resolve_actor(actor_id)
    if size is None:
        size = get_config().default_page_size
    try:
        result = get_network().list_returned(page, size, actor)
    except BookshareError as e:
        fail(e)

    if not result.content:
        console.print("[dim]No loans found[/dim]")
        return

    console.print(format_loan_table(result.content, "Lent Books"))
    print_page_footer(result)


@lending_app.command("history")
def lending_history(
    book_id: str = typer.Argument(..., help="Book ID"),
) -> None:
    """Show every loan of a book."""
    try:
        loans = get_network().loan_history(book_id)
    except BookshareError as e:
        fail(e)

    if not loans:
        console.print("[dim]Never lent[/dim]")
        return

    table = Table(title="Loan History", show_header=True, header_style="bold magenta")
    table.add_column("Loan", style="dim")
    table.add_column("Borrower")
    table.add_column("Borrowed")
    table.add_column("Returned")
    table.add_column("Approved")
    for loan in loans:
        table.add_row(
            loan.id,
            loan.borrower_id,
            loan.borrowed_at[:10],
            (loan.returned_at or "-")[:10],
            (loan.approved_at or "-")[:10],
        )

    console.print(table)


# ============================================================================
# Feedback Commands
# ============================================================================


@feedback_app.command("give")
def feedback_give(
    book_id: str = typer.Argument(..., help="Book ID"),
    note: float = typer.Argument(..., help="Note from 0 to 5"),
    comment: str = typer.Argument(..., help="Comment"),
    actor_id: Optional[str] = typer.Option(None, "--as", help=ACTOR_HELP),
) -> None:
    """Rate a book."""
    actor = resolve_actor(actor_id)
    try:
        get_network().submit_feedback(book_id, actor, note, comment)
    except BookshareError as e:
        fail(e)
    print_success("Feedback recorded")


@feedback_app.command("list")
def feedback_list(
    book_id: str = typer.Argument(..., help="Book ID"),
    page: int = typer.Option(0, "--page", "-p", help="Page number, starting at 0"),
    size: Optional[int] = typer.Option(None, "--size", help="Page size"),
    actor_id: Optional[str] = typer.Option(None, "--as", help=ACTOR_HELP),
) -> None:
    """Show the feedback on a book."""
    actor = resolve_actor(actor_id)
    if size is None:
        size = get_config().default_page_size
    try:
        result = get_network().list_feedback(book_id, page, size, actor)
    except BookshareError as e:
        fail(e)

    if not result.content:
        console.print("[dim]No feedback yet[/dim]")
        return

    table = Table(title="Feedback", show_header=True, header_style="bold magenta")
    table.add_column("Note", justify="center")
    table.add_column("Comment", max_width=60)
    table.add_column("Date")
    for fb in result.content:
        comment_text = f"{fb.comment} [bold](yours)[/bold]" if fb.own_feedback else fb.comment
        table.add_row(f"{fb.note:.1f}", comment_text, fb.created_at[:10])

    console.print(table)
    print_page_footer(result)


# ============================================================================
# Version Command
# ============================================================================


@app.command()
def version() -> None:
    """Show version information."""
    from . import __version__

    console.print(f"bookshare version {__version__}")


# ============================================================================
# Main Entry Point
# ============================================================================


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
