"""
Command-line interface for the causal playground.

Usage:
    python -m causal_playground --config scenarios/chain.yaml
    causal-playground --example collider --seed 7
"""

import sys
from typing import Optional

import click

from . import __version__
from .engine import EXAMPLE_GRAPHS
from .pipeline import PipelineConfig, SimulationPipeline


@click.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    default=None,
    help="Path to YAML scenario file",
)
@click.option(
    "--example",
    "-e",
    type=click.Choice(sorted(EXAMPLE_GRAPHS)),
    default=None,
    help="Run a built-in example graph instead of a scenario file",
)
@click.option(
    "--samples",
    "-n",
    type=int,
    default=None,
    help="Override number of samples",
)
@click.option(
    "--seed",
    "-s",
    type=int,
    default=None,
    help="Override random seed",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default=None,
    help="Directory to write marginals.yaml into",
)
@click.option(
    "--verbose/--quiet",
    "-v/-q",
    default=True,
    help="Enable/disable verbose logging",
)
@click.version_option(version=__version__, prog_name="causal-playground")
def main(
    config: Optional[str],
    example: Optional[str],
    samples: Optional[int],
    seed: Optional[int],
    output: Optional[str],
    verbose: bool,
) -> None:
    """
    Causal Playground - discrete causal graph simulator

    Estimate marginals under interventions and observations.

    Example:
        causal-playground --example chain
    """
    if config is None and example is None:
        click.echo("Error: one of --config or --example is required", err=True)
        sys.exit(1)

    try:
        if config:
            pipeline_config = PipelineConfig.from_yaml(config)
        else:
            pipeline_config = PipelineConfig(example=example)

        # Apply overrides
        if samples is not None:
            pipeline_config.n_samples = samples
        if seed is not None:
            pipeline_config.seed = seed
        if output:
            pipeline_config.output_dir = output
        pipeline_config.verbose = verbose

        result = SimulationPipeline(pipeline_config).run()
        click.echo(result.summary)

    except FileNotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(f"Simulation failed: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
