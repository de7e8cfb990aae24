#!/usr/bin/env python3
"""APSIS command-line interface.

Usage::

    apsis screen catalog.json --t0 0 --t1 86400 --threshold 10
    apsis sample catalog.json station debris --t0 0 --t1 86400 -o dist.txt
    apsis report catalog.json probe moon --t0 0 --t1 3.2 --threshold 0.01 \\
        --target 0.17 --report-dir reports/transfer
"""
from __future__ import annotations

import sys
import logging

import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box

from .catalog import load_orbit_file
from .intercept import SearchSettings, screen_pairs
from .orbit import Orbit

console = Console()


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """APSIS — Analytic Proximity Search for Intercepting Orbits."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(name)s — %(message)s")


@main.command()
@click.argument("catalog", type=click.Path(exists=True))
@click.option("--t0", type=float, required=True, help="Start of the search span")
@click.option("--t1", type=float, required=True, help="End of the search span")
@click.option("--threshold", "-t", type=float, required=True, help="Distance tolerance")
@click.option("--target", type=float, default=0.0, show_default=True,
              help="Separation to search for (0 for collisions)")
@click.option("--max-intercepts", type=int, default=4, show_default=True,
              help="Maximum intercepts per pair")
@click.option("--max-steps", type=int, default=100, show_default=True,
              help="Step budget of each search")
@click.option("--output", "-o", type=click.Path(), help="Save results to CSV")
def screen(
    catalog: str,
    t0: float,
    t1: float,
    threshold: float,
    target: float,
    max_intercepts: int,
    max_steps: int,
    output: str | None,
):
    """Screen every pair of orbits in a catalog for intercepts."""
    orbits = _load_catalog(catalog)
    settings = _get_settings(threshold, target, max_intercepts, max_steps)

    df = screen_pairs(orbits, t0, t1, settings)

    n_hits = len(df)
    n_pairs = len(df[["body1", "body2"]].drop_duplicates()) if n_hits else 0
    console.print(
        Panel(
            f"Orbits: {len(orbits)}\n"
            f"Search span: [{t0:g}, {t1:g}]\n"
            f"Target distance: {target:g} ± {threshold:g}\n"
            f"Intercepts found: [bold green]{n_hits}[/bold green]\n"
            f"Pairs with intercepts: {n_pairs}",
            title="Screening Results",
            box=box.ROUNDED,
        )
    )

    if n_hits:
        _display_intercept_table(df)

    if output:
        df.to_csv(output, index=False)
        console.print(f"\nResults saved to {output}")


@main.command()
@click.argument("catalog", type=click.Path(exists=True))
@click.argument("name1")
@click.argument("name2")
@click.option("--t0", type=float, required=True, help="Start of the sampled span")
@click.option("--t1", type=float, required=True, help="End of the sampled span")
@click.option("--samples", "-n", type=int, default=1000, show_default=True,
              help="Number of evenly spaced samples")
@click.option("--output", "-o", type=click.Path(), help="Write samples to a text file")
def sample(
    catalog: str,
    name1: str,
    name2: str,
    t0: float,
    t1: float,
    samples: int,
    output: str | None,
):
    """Sample the separation of two bodies over time."""
    from .viz import sample_distance, write_distance_samples

    orbits = _load_catalog(catalog)
    orbit1, orbit2 = _get_pair(orbits, name1, name2)

    df = sample_distance(orbit1, orbit2, t0, t1, samples)
    closest = df.loc[df["distance"].idxmin()]
    console.print(
        f"Closest sampled approach: d={closest['distance']:.6g} at t={closest['time']:.6g}"
    )

    if output:
        write_distance_samples(df, output)
        console.print(f"Samples saved to {output}")


@main.command()
@click.argument("catalog", type=click.Path(exists=True))
@click.argument("name1")
@click.argument("name2")
@click.option("--t0", type=float, required=True, help="Start of the search span")
@click.option("--t1", type=float, required=True, help="End of the search span")
@click.option("--threshold", "-t", type=float, required=True, help="Distance tolerance")
@click.option("--target", type=float, default=0.0, show_default=True,
              help="Separation to search for (0 for collisions)")
@click.option("--report-dir", type=click.Path(), required=True,
              help="Directory for plots and summary")
def report(
    catalog: str,
    name1: str,
    name2: str,
    t0: float,
    t1: float,
    threshold: float,
    target: float,
    report_dir: str,
):
    """Generate a report with plots for one pair of orbits."""
    from .viz import generate_report

    orbits = _load_catalog(catalog)
    orbit1, orbit2 = _get_pair(orbits, name1, name2)
    settings = _get_settings(threshold, target)

    path = generate_report(orbit1, orbit2, t0, t1, settings, output_dir=report_dir)
    console.print(f"Report generated in {path}")


def _load_catalog(catalog: str) -> dict[str, Orbit]:
    try:
        orbits = load_orbit_file(catalog)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)
    console.print(f"Loaded {len(orbits)} orbits from {catalog}")
    return orbits


def _get_pair(orbits: dict[str, Orbit], name1: str, name2: str) -> tuple[Orbit, Orbit]:
    missing = [n for n in (name1, name2) if n not in orbits]
    if missing:
        console.print(f"[red]Error: unknown orbit(s): {', '.join(missing)}[/red]")
        sys.exit(1)
    return orbits[name1], orbits[name2]


def _get_settings(
    threshold: float,
    target: float,
    max_intercepts: int = 4,
    max_steps: int = 100,
) -> SearchSettings:
    if threshold <= 0.0:
        console.print("[red]Error: --threshold must be positive[/red]")
        sys.exit(1)
    return SearchSettings(
        threshold=threshold,
        target_distance=target,
        max_intercepts=max_intercepts,
        max_steps=max_steps,
    )


def _display_intercept_table(df):
    """Display a DataFrame of intercepts as a rich table."""
    table = Table(title="Intercepts", box=box.SIMPLE_HEAVY, show_lines=True)
    table.add_column("Time", style="cyan", justify="right")
    table.add_column("Body 1")
    table.add_column("Body 2")
    table.add_column("Distance", justify="right")
    table.add_column("Speed", justify="right")

    for _, row in df.head(50).iterrows():
        speed = row["speed"]
        color = "red" if speed < 0 else "green"
        table.add_row(
            f"{row['time']:.6g}",
            str(row["body1"]),
            str(row["body2"]),
            f"{row['distance']:.6g}",
            f"[{color}]{speed:+.4g}[/{color}]",
        )

    if len(df) > 50:
        console.print(f"(showing 50 of {len(df)} intercepts)")
    console.print(table)


if __name__ == "__main__":
    main()
