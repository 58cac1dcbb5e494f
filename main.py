"""
Praxis Coach CLI - Bank maintenance and server launch.

Commands:
    tag                - Suggest DOK and framework tags for every question
    validate-tags      - Check stored tags against the skill catalog
    audit-distractors  - Classify every wrong choice by misconception pattern
    serve              - Run the API server
"""

import json
from collections import Counter
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from config import API_HOST, API_PORT, setup_logging
from core.distractor_matcher import match_distractor_pattern
from core.question_bank import QuestionBank
from core.question_tagger import suggest_tags, validate_tags
from core.skill_map import SkillMap

app = typer.Typer(
    name="praxis-coach",
    help="Praxis Coach: school psychology exam practice tools",
    no_args_is_help=True,
)
console = Console()

CONFIDENCE_STYLES = {"high": "green", "medium": "yellow", "low": "red"}


def _load(bank_path: Optional[Path], skills_dir: Optional[Path]):
    setup_logging("WARNING")
    skill_map = SkillMap(str(skills_dir) if skills_dir else None)
    bank = QuestionBank(str(bank_path) if bank_path else None)
    return skill_map, bank


@app.command()
def tag(
    bank_path: Annotated[Optional[Path], typer.Option("--bank", "-b", help="Question bank JSON")] = None,
    skills_dir: Annotated[Optional[Path], typer.Option("--skills", "-s", help="Skill catalog directory")] = None,
    output: Annotated[Optional[Path], typer.Option("--output", "-o", help="Write suggestions as JSON")] = None,
) -> None:
    """Suggest DOK levels and framework tags without modifying the bank."""
    skill_map, bank = _load(bank_path, skills_dir)
    suggestions = [suggest_tags(q, skill_map) for q in bank.all()]

    table = Table(title=f"Tagging suggestions ({len(suggestions)} questions)")
    table.add_column("Question", style="cyan")
    table.add_column("DOK", justify="center")
    table.add_column("Framework")
    table.add_column("Step")
    table.add_column("Confidence")

    for s in suggestions:
        style = CONFIDENCE_STYLES[s.confidence]
        table.add_row(
            s.question_id,
            str(s.suggested_dok),
            s.suggested_framework,
            s.suggested_framework_step or "-",
            f"[{style}]{s.confidence}[/{style}]"
        )
    console.print(table)

    review = [s.question_id for s in suggestions if s.needs_review]
    if review:
        console.print(f"[yellow]Needs review: {', '.join(review)}[/]")

    if output:
        output.write_text(json.dumps([s.to_dict() for s in suggestions], indent=2), encoding="utf-8")
        console.print(f"[green]✓ Saved to {output}[/]")


@app.command("validate-tags")
def validate(
    bank_path: Annotated[Optional[Path], typer.Option("--bank", "-b", help="Question bank JSON")] = None,
    skills_dir: Annotated[Optional[Path], typer.Option("--skills", "-s", help="Skill catalog directory")] = None,
) -> None:
    """Report questions whose skill, DOK or framework tags don't line up."""
    skill_map, bank = _load(bank_path, skills_dir)

    failures = 0
    for question in bank.all():
        problems = validate_tags(question, skill_map)
        if problems:
            failures += 1
            console.print(f"[red]✗ {question.id}[/]")
            for problem in problems:
                console.print(f"    {problem}")

    if failures:
        console.print(f"[red]{failures} of {len(bank)} questions have tag problems[/]")
        raise typer.Exit(code=1)
    console.print(f"[green]✓ All {len(bank)} questions have valid tags[/]")


@app.command("audit-distractors")
def audit_distractors(
    bank_path: Annotated[Optional[Path], typer.Option("--bank", "-b", help="Question bank JSON")] = None,
    skills_dir: Annotated[Optional[Path], typer.Option("--skills", "-s", help="Skill catalog directory")] = None,
    unmatched: Annotated[bool, typer.Option("--unmatched", "-u", help="Only list unmatched choices")] = False,
) -> None:
    """Classify every wrong answer choice by the pattern it most likely represents."""
    _, bank = _load(bank_path, skills_dir)

    table = Table(title="Distractor audit")
    table.add_column("Question", style="cyan")
    table.add_column("Choice", justify="center")
    table.add_column("Pattern")
    table.add_column("Text", overflow="fold")

    counts = Counter()
    for question in bank.all():
        correct_text = question.correct_text
        for letter, text in sorted(question.choices.items()):
            if letter in question.correct_answer:
                continue
            pattern_id = match_distractor_pattern(text, correct_text)
            counts[pattern_id or "unmatched"] += 1
            if unmatched and pattern_id:
                continue
            table.add_row(question.id, letter, pattern_id or "[dim]unmatched[/dim]", text)

    console.print(table)
    for pattern_id, count in counts.most_common():
        console.print(f"  {pattern_id}: {count}")


@app.command()
def serve(
    host: Annotated[str, typer.Option("--host", help="Bind address")] = API_HOST,
    port: Annotated[int, typer.Option("--port", "-p", help="Port")] = API_PORT,
    reload: Annotated[bool, typer.Option("--reload", help="Auto-reload on code changes")] = False,
) -> None:
    """Run the FastAPI server with uvicorn."""
    import uvicorn
    uvicorn.run("api.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
