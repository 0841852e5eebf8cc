"""CLI entry point for restful-openapi."""

import logging
from pathlib import Path

import click

from restful_openapi.config import load_options
from restful_openapi.errors import GeneratorError
from restful_openapi.generator.document import GenerationResult, generate_document
from restful_openapi.model.loader import load_model
from restful_openapi.writer import write_document

HTTP_METHODS = ("get", "post", "put", "patch", "delete")


def _generate(model_path: Path, options_path: Path | None, **overrides) -> tuple[GenerationResult, Path]:
    """Load model and options, then generate, turning library errors into CLI errors."""
    try:
        options = load_options(options_path, **overrides)
        graph = load_model(model_path)
        return generate_document(graph, options), options.output
    except GeneratorError as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
def main(verbose: bool):
    """restful-openapi: generate JSON:API flavored OpenAPI documents from data models."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("model_path", type=click.Path(exists=True, path_type=Path))
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Output file (.yaml/.yml for YAML, anything else for JSON).")
@click.option("--options", "options_path", default=None, type=click.Path(exists=True, path_type=Path), help="YAML/JSON file with generator options.")
@click.option("--spec-version", default=None, help="OpenAPI version of the output, e.g. 3.0.0 or 3.1.0.")
@click.option("--title", default=None, help="API title.")
@click.option("--api-version", default=None, help="API version string.")
@click.option("--prefix", default=None, help="URL prefix for all paths.")
def generate(
    model_path: Path,
    output: Path | None,
    options_path: Path | None,
    spec_version: str | None,
    title: str | None,
    api_version: str | None,
    prefix: str | None,
):
    """Generate an OpenAPI document from a model definition."""
    click.echo(f"Loading {model_path}...")
    result, output_path = _generate(
        model_path,
        options_path,
        output=output,
        spec_version=spec_version,
        title=title,
        version=api_version,
        prefix=prefix,
    )

    for warning in result.warnings:
        click.echo(f"Warning: {warning}", err=True)

    write_document(result.document, output_path)
    doc = result.document
    click.echo(
        f"Generated {len(doc['paths'])} paths and {len(doc['components']['schemas'])} schemas in {output_path}"
    )


@main.command()
@click.argument("model_path", type=click.Path(exists=True, path_type=Path))
@click.option("--options", "options_path", default=None, type=click.Path(exists=True, path_type=Path), help="YAML/JSON file with generator options.")
@click.option("--prefix", default=None, help="URL prefix for all paths.")
def paths(model_path: Path, options_path: Path | None, prefix: str | None):
    """List generated operations without writing a document."""
    # output is required by the options model but never written here
    result, _ = _generate(model_path, options_path, output=Path("openapi.json"), prefix=prefix)
    for warning in result.warnings:
        click.echo(f"Warning: {warning}", err=True)
    for path, item in result.document["paths"].items():
        for method in HTTP_METHODS:
            if method in item:
                click.echo(f"{method.upper():<7}{path}  {item[method]['operationId']}")
