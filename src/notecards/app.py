"""Interactive CLI application."""
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from notecards.db import init_db, DEFAULT_DB_PATH
from notecards.decks import (
    delete_deck, get_deck, get_due_items, list_decks, save_deck, save_items, save_session,
)
from notecards.engine import ReviewEngine
from notecards.importer import (
    deck_id_from_name, export_json, export_qa_text, extract_deck_name, import_file,
)
from notecards.models import Grade
from notecards.stats import due_label, get_deck_stats, summarize_session

console = Console()

GRADE_COLORS = {
    Grade.AGAIN: "red",
    Grade.HARD: "dark_orange",
    Grade.GOOD: "green",
    Grade.EASY: "blue",
}

PRACTICE_HELP = "[f]lip  [n]ext  [p]rev  [s]kip  grade [1]again [2]hard [3]good [4]easy  [q]uit"


class SessionExitRequested(Exception):
    """Raised when the user asks to leave a practice run."""


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in ("q", "quit", "menu"):
        raise SessionExitRequested()
    return answer


def show_welcome():
    console.print(Panel(
        "[bold]Notecards[/bold]\n[dim]Flashcard practice with spaced repetition[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("decks", "List your decks"),
        ("import", "Import a deck from a text file"),
        ("practice", "Practice a deck"),
        ("export", "Export a deck as Q/A text or JSON"),
        ("stats", "Deck statistics"),
        ("delete", "Delete a deck"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def show_card(engine: ReviewEngine) -> None:
    item = engine.current_item
    session = engine.session
    title = f"Card {engine.cursor + 1}/{len(engine.items)}"
    if session:
        title += f"  ·  {session.cards_reviewed} reviewed, {session.cards_remaining} left"
    console.print(Panel(escape(item.front), title=title, border_style="cyan"))
    if engine.flipped:
        console.print(Panel(escape(item.back), border_style="green"))


def show_summary(session) -> None:
    summary = summarize_session(session)
    table = Table(title="Session Summary")
    table.add_column("Grade")
    table.add_column("Cards", justify="right")
    for grade in Grade:
        color = GRADE_COLORS[grade]
        table.add_row(f"[{color}]{grade.value}[/{color}]", str(summary["grades"][grade.value]))
    console.print(table)
    console.print(
        f"  Reviewed: [bold]{summary['cards_reviewed']}[/bold]  |  "
        f"Remaining: [bold]{summary['cards_remaining']}[/bold]  |  "
        f"Retention: [bold]{summary['retention']}%[/bold]  |  "
        f"Avg time: [bold]{summary['average_review_time_ms'] / 1000:.1f}s[/bold]"
    )


def run_practice(db_path: str, deck_id: str, items: list, engine: ReviewEngine | None = None):
    """Practice *items*, then merge the graded cards and the session into storage."""
    if not items:
        console.print("[yellow]No cards to review right now![/yellow]")
        return None
    engine = engine or ReviewEngine()
    engine.load_deck(items)
    engine.start_session()
    console.print(f"\n[bold]Practice[/bold] — {len(items)} cards\n[dim]{escape(PRACTICE_HELP)}[/dim]\n")

    try:
        while not engine.is_exhausted:
            show_card(engine)
            action = session_prompt("Action", default="f" if not engine.flipped else "3").strip().lower()
            if action == "f":
                engine.flip()
            elif action == "n":
                engine.next()
            elif action == "p":
                engine.prev()
            elif action == "s":
                engine.skip()
            elif Grade.from_key(action):
                if not engine.flipped:
                    console.print("[yellow]Flip the card before grading.[/yellow]")
                    continue
                cursor = engine.cursor
                engine.grade(Grade.from_key(action))
                if engine.cursor == cursor and not engine.is_exhausted:
                    # last card: grading does not advance, so hide the answer again
                    engine.flip()
                    console.print(f"[dim]Last card graded. Use {escape('[p]rev')} to go back to ungraded cards.[/dim]")
            else:
                console.print("[red]Unknown action.[/red]")
    except SessionExitRequested:
        console.print("[dim]Ending session early.[/dim]")

    session = engine.end_session()
    if session.results:
        save_items(db_path, engine.items)
    save_session(db_path, session, deck_id=deck_id, ended_at=engine.now())
    show_summary(session)
    return session


def choose_deck(db_path: str) -> str | None:
    decks = list_decks(db_path)
    if not decks:
        console.print("[yellow]No decks yet. Use 'import' to add one.[/yellow]")
        return None
    for d in decks:
        console.print(f"  [cyan]{d['deck_id']}[/cyan] ({d['cards']} cards)")
    return Prompt.ask("Deck", choices=[d["deck_id"] for d in decks])


def cmd_decks(db_path: str):
    decks = list_decks(db_path)
    if not decks:
        console.print("[yellow]No decks yet. Use 'import' to add one.[/yellow]")
        return
    table = Table(title="Your Decks")
    table.add_column("Deck", style="cyan")
    table.add_column("Cards", justify="right")
    table.add_column("Next review")
    for d in decks:
        label = due_label(d["next_due"])
        table.add_row(d["deck_id"], str(d["cards"]), label or "")
    console.print(table)


def cmd_import(db_path: str):
    file_path = Prompt.ask("File path")
    if not Path(file_path).exists():
        console.print(f"[red]File not found: {file_path}[/red]")
        return
    text = Path(file_path).read_text(encoding="utf-8")
    deck_name = Prompt.ask("Deck name", default=extract_deck_name(text) or Path(file_path).stem)
    items = import_file(file_path, deck_name=deck_name)
    if not items:
        console.print("[yellow]No cards found. Expected 'Q:'/'A:' blocks or an Anki text export.[/yellow]")
        return
    deck_id = deck_id_from_name(deck_name)
    save_deck(db_path, deck_id, items)
    console.print(f"[green]Imported {len(items)} cards → {deck_id}[/green]")


def cmd_practice(db_path: str):
    deck_id = choose_deck(db_path)
    if deck_id is None:
        return
    mode = Prompt.ask("Cards", choices=["due", "all"], default="due")
    items = get_due_items(db_path, deck_id) if mode == "due" else get_deck(db_path, deck_id)
    run_practice(db_path, deck_id, items)


def cmd_export(db_path: str):
    deck_id = choose_deck(db_path)
    if deck_id is None:
        return
    fmt = Prompt.ask("Format", choices=["txt", "json"], default="txt")
    out = Prompt.ask("Output file", default=f"{deck_id}.{fmt}")
    items = get_deck(db_path, deck_id)
    content = export_json(items) if fmt == "json" else export_qa_text(items)
    Path(out).write_text(content, encoding="utf-8")
    console.print(f"[green]Exported {deck_id} → {out}[/green]")


def cmd_stats(db_path: str):
    deck_id = choose_deck(db_path)
    if deck_id is None:
        return
    stats = get_deck_stats(db_path, deck_id)
    console.print(
        f"\n  Cards: [bold]{stats['total']}[/bold]  |  Due: [bold]{stats['due']}[/bold]  |  "
        f"New: [bold]{stats['new']}[/bold]  |  Reviewed: [bold]{stats['reviewed']}[/bold]"
    )


def cmd_delete(db_path: str):
    deck_id = choose_deck(db_path)
    if deck_id is None:
        return
    if Confirm.ask(f"Delete deck {deck_id}?", default=False):
        deleted = delete_deck(db_path, deck_id)
        console.print(f"[green]Deleted {deleted} cards.[/green]")


COMMANDS = {
    "decks": cmd_decks,
    "import": cmd_import,
    "practice": cmd_practice,
    "export": cmd_export,
    "stats": cmd_stats,
    "delete": cmd_delete,
}


def main():
    db_path = DEFAULT_DB_PATH
    init_db(db_path)
    show_welcome()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="practice").strip().lower()
        try:
            if choice in ("quit", "exit", "q"):
                console.print("[dim]Bye![/dim]")
                break
            elif choice in COMMANDS:
                COMMANDS[choice](db_path)
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
