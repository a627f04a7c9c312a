"""Rich rendering of a run's stage states.

Color scheme
------------
- green  : PASSED
- red    : FAILED
- yellow : RUNNING
- dim    : NOT_STARTED, SKIPPED
"""

from __future__ import annotations

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from pagesmith.core.run_ledger import RunLedger
from pagesmith.core.stage_machine import StageMachine
from pagesmith.models.ledger import LedgerEntry
from pagesmith.models.stages import PIPELINE_STAGES, StageState

_STATE_STYLES: dict[StageState, str] = {
    StageState.PASSED: "bold green",
    StageState.FAILED: "bold red",
    StageState.RUNNING: "bold yellow",
    StageState.NOT_STARTED: "dim",
    StageState.SKIPPED: "dim",
}

_STATE_LABELS: dict[StageState, str] = {
    StageState.PASSED: "[green]PASSED[/green]",
    StageState.FAILED: "[bold red]FAILED[/bold red]",
    StageState.RUNNING: "[yellow]RUNNING[/yellow]",
    StageState.NOT_STARTED: "[dim]NOT STARTED[/dim]",
    StageState.SKIPPED: "[dim]SKIPPED[/dim]",
}

_DISPLAY_NAMES = {sd.stage_id: sd.display_name for sd in PIPELINE_STAGES}


class StatusRenderer:
    """Renders one run, rebuilt from the ledger, as a Rich panel.

    Parameters
    ----------
    console:
        Rich Console instance. A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def render(self, ledger: RunLedger, run_id: str, *, chain_valid: bool) -> Panel:
        machine = StageMachine.rebuild(ledger, run_id)
        latest: dict[str, LedgerEntry] = {}
        for entry in ledger.get_run_entries(run_id):
            latest[entry.stage_id] = entry

        table = Table(show_header=True, header_style="bold cyan", expand=True)
        table.add_column("#", style="dim", width=3, justify="right")
        table.add_column("Stage", min_width=22)
        table.add_column("State", min_width=12, justify="center")
        table.add_column("Output", min_width=14)
        table.add_column("Details", min_width=20)

        for i, (stage_id, state) in enumerate(machine.get_all_states().items()):
            entry = latest[stage_id]
            style = _STATE_STYLES.get(state, "")
            name = _DISPLAY_NAMES.get(stage_id, stage_id)
            output = entry.output_hash[:12] if entry.output_hash else "[dim]-[/dim]"
            details = (
                f"[red]{entry.detail}[/red]"
                if state == StageState.FAILED
                else f"[dim]{entry.detail or entry.timestamp_utc.strftime('%H:%M:%S')}[/dim]"
            )
            table.add_row(
                str(i),
                f"[{style}]{name}[/{style}]",
                _STATE_LABELS.get(state, state.value),
                output,
                details,
            )

        chain = "[green]valid[/green]" if chain_valid else "[bold red]BROKEN[/bold red]"
        summary = "  |  ".join(
            [
                f"[bold]Run:[/bold] {run_id}",
                f"[bold]Site:[/bold] {machine.build_version if latest else '-'}",
                f"[bold]Generator:[/bold] {machine.generator_version or '-'}",
                f"[bold]Chain:[/bold] {chain}",
            ]
        )
        return Panel(
            Group(table, Text(""), Text.from_markup(summary)),
            title="[bold]pagesmith status[/bold]",
            border_style="blue",
            padding=(1, 2),
        )

    def print_run(self, ledger: RunLedger, run_id: str, *, chain_valid: bool) -> None:
        self.console.print(self.render(ledger, run_id, chain_valid=chain_valid))
