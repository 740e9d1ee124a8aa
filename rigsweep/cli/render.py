"""Plain-text rendering of a cleanup run report."""

from __future__ import annotations

from rigsweep.core.models import RunConfig, RunReport


def render_header(config: RunConfig) -> str:
    return "Cleanup preview (--dry-run)" if config.dry_run else "Town cleanup"


def _render_rigs(report: RunReport) -> list[str]:
    lines: list[str] = []
    for result in report.rigs:
        if not result.units:
            continue
        lines.append(f"{result.rig.name}: {len(result.units)} done polecat(s)")
        for unit in result.units:
            label = f"{result.rig.name}/{unit.name}"
            zombie = " (session running)" if unit.session_running else ""
            if unit.action == "would_reclaim":
                lines.append(f"  Would nuke: {label}{zombie}")
            elif unit.action == "reclaimed":
                lines.append(f"  Nuking {label}{zombie}... done")
            else:
                lines.append(f"  Nuking {label}{zombie}... failed ({unit.error})")
    return lines


def _render_convoys(report: RunReport) -> list[str]:
    verb = "Would close convoy" if report.dry_run else "Closed convoy"
    return [f"  {verb}: {record.id} ({record.title})" for record in report.closed_convoys]


def _render_branches(report: RunReport) -> list[str]:
    lines: list[str] = []
    for result in report.gc_rigs:
        if result.previewed:
            lines.append(f"  Would gc branches in {result.rig.name}")
        elif result.deleted:
            lines.append(f"  GC'd {result.deleted} branch(es) in {result.rig.name}")
    return lines


def _render_summary(report: RunReport) -> list[str]:
    lines = ["Dry run complete. Would clean:" if report.dry_run else "Cleanup complete:"]
    if "polecats" in report.passes:
        if report.units_reclaimed:
            lines.append(f"  - {report.units_reclaimed} polecat(s) nuked")
        else:
            lines.append("  - No done polecats found")
        if report.units_failed:
            lines.append(f"  - {report.units_failed} polecat(s) failed to nuke")
    if "convoys" in report.passes:
        if report.convoys_closed:
            lines.append(f"  - {report.convoys_closed} convoy(s) closed")
        else:
            lines.append("  - No completed convoys found")
    if "branches" in report.passes:
        if report.dry_run:
            lines.append(f"  - Branch gc previewed in {len(report.gc_rigs)} rig(s)")
        elif report.branches_collected:
            lines.append(f"  - {report.branches_collected} branch(es) gc'd")
        else:
            lines.append("  - No stale branches found")
    return lines


def render_report(report: RunReport) -> str:
    """Render the body of a run: per-rig detail, warnings, then the summary."""
    lines = [*_render_rigs(report), *_render_convoys(report), *_render_branches(report)]
    if report.errors:
        lines.append("")
        lines.extend(f"Warning: {error.describe()}" for error in report.errors)
    lines.append("")
    lines.extend(_render_summary(report))
    return "\n".join(lines)
