import json
import logging
from pathlib import Path

import click

from .cli_utils import reconstruct_command_line
from .pipeline import ConverterConfig, NamingConvention, RamlConverter, ReferenceResolver, load_schemas
from .pipeline.report import render_text_report

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(levelname)s:%(name)s:%(message)s"
NAMING_CHOICES = [convention.value for convention in NamingConvention]


def _load_config(config):
    if config is None:
        return ConverterConfig()
    with open(config) as f:
        return ConverterConfig.from_dict(json.load(f))


@click.group()
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Shortcut for --log-level INFO")
def main(log_level, verbose):
    """Convert RAML type libraries to JSON Schema and resolve schema references."""
    level = logging.INFO if verbose and log_level.upper() == "WARNING" else getattr(logging, log_level.upper())
    logging.basicConfig(level=level, format=LOG_FORMAT)


@main.command()
@click.option("--naming-convention", "-n", default=None, type=click.Choice(NAMING_CHOICES))
@click.option("--config", "-c", default=None, type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.option("--workers", "-w", default=None, type=click.IntRange(min=1), help="Parallel file workers")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the run result as JSON")
@click.argument("input_dir", type=click.Path(exists=True, file_okay=False, resolve_path=True))
@click.argument("output_dir", type=click.Path(file_okay=False, resolve_path=True))
def convert(naming_convention, config, workers, as_json, input_dir, output_dir):
    """Convert every RAML file of INPUT_DIR into schemas under OUTPUT_DIR."""
    converter_config = _load_config(config)

    # Command line overrides the config file
    if naming_convention is not None:
        converter_config.naming_convention = NamingConvention(naming_convention)
    if workers is not None:
        converter_config.max_workers = workers

    try:
        run = RamlConverter(converter_config).convert_directory(Path(input_dir), Path(output_dir))
    except Exception as e:
        logger.exception("Conversion failed")
        raise click.ClickException(str(e)) from e

    if as_json:
        click.echo(json.dumps(run.to_dict(), indent=2, ensure_ascii=False))
    else:
        click.echo(render_text_report(run, reconstruct_command_line(convert)), nl=False)


@main.command()
@click.option("--config", "-c", default=None, type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.option("--batch-size", "-b", default=None, type=click.IntRange(min=1), help="Schemas per batch")
@click.option("--workers", "-w", default=None, type=click.IntRange(min=1), help="Parallel batch workers")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the reference graph as JSON")
@click.argument("schema_dir", type=click.Path(exists=True, file_okay=False, resolve_path=True))
def references(config, batch_size, workers, as_json, schema_dir):
    """Resolve $ref pointers between the JSON schemas of SCHEMA_DIR."""
    converter_config = _load_config(config)

    # Command line overrides the config file
    if batch_size is not None:
        converter_config.reference_batch_size = batch_size
    if workers is not None:
        converter_config.reference_max_workers = workers

    try:
        schemas = load_schemas(Path(schema_dir))
        resolver = ReferenceResolver(
            batch_size=converter_config.reference_batch_size,
            max_workers=converter_config.reference_max_workers,
        )
        stats = resolver.resolve(schemas)
    except Exception as e:
        logger.exception("Reference resolution failed")
        raise click.ClickException(str(e)) from e

    if as_json:
        payload = {"stats": stats.to_dict(), "schemas": [schema.to_dict() for schema in schemas]}
        click.echo(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    click.echo(f"Schemas loaded:        {len(schemas)}")
    click.echo(f"References:            {stats.total_references}")
    click.echo(f"Resolved:              {stats.resolved}")
    click.echo(f"Unresolved:            {stats.unresolved}")
    click.echo(f"Self references:       {stats.self_references}")
    click.echo(f"Cache hits:            {stats.cache_hits}")
    for schema in schemas:
        if schema.referenced_by:
            click.echo(f"{schema.relative_path} <- {len(schema.referenced_by)} schema(s)")
    for source, ref in stats.unresolved_refs:
        click.echo(f"unresolved: {source} -> {ref}")


if __name__ == "__main__":
    main()
