import stat
import sys
from pathlib import Path
from typing import Optional

import typer

from vfsembed.artifact import load_filesystem, walk
from vfsembed.config import GenerateConfig
from vfsembed.errors import VfsembedError
from vfsembed.generate import generate
from vfsembed.logger import setup_logger


app = typer.Typer(
    name="vfsembed",
    help="vfsembed: embed a directory tree into a generated Python module",
    add_completion=False,
)

@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging",
    ),
):

    setup_logger(verbose=verbose)

@app.command("generate")
def generate_command(
    input_dir: Path = typer.Argument(
        ...,
        help="Directory to embed",
    ),
    output: Path = typer.Option(
        Path("assets_vfsdata.py"),
        "--output",
        "-o",
        help="Generated module path",
    ),
    package: Optional[str] = typer.Option(
        None,
        "--package",
        "-p",
        help="Dotted name the module is imported as (default: output file stem)",
    ),
    variable_name: str = typer.Option(
        "assets",
        "--variable",
        help="Name of the filesystem value in the generated module",
    ),
    variable_comment: str = typer.Option(
        "",
        "--comment",
        help="Comment written above the filesystem value",
    ),
    tags: str = typer.Option(
        "",
        "--tags",
        "-t",
        help="Build tags recorded in the generated header",
    ),
):

    try:
        config = GenerateConfig(
            input=input_dir,
            output=output,
            package=package,
            variable_name=variable_name,
            variable_comment=variable_comment,
            tags=tags,
        )

        typer.echo(f"Embedding {config.input}")
        written = generate(config)
        typer.echo(f"Generated {written}")

    except VfsembedError as exc:
        typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
        sys.exit(exc.exit_code)

@app.command("ls")
def ls_command(
    artifact: Path = typer.Argument(
        ...,
        help="Generated module to inspect",
    ),
    path: str = typer.Argument(
        "/",
        help="Directory or file inside the embedded tree",
    ),
    variable_name: str = typer.Option(
        "assets",
        "--variable",
        help="Name of the filesystem value in the generated module",
    ),
):

    try:
        fs = load_filesystem(artifact, variable_name)
        for entry_path, record in walk(fs, path):
            typer.echo(
                f"{stat.filemode(record.mode)} {record.size:>10} "
                f"{record.mod_time.isoformat()} {entry_path}"
            )

    except FileNotFoundError:
        typer.secho(f"Error: {path} does not exist in {artifact}", fg=typer.colors.RED, err=True)
        sys.exit(1)

    except VfsembedError as exc:
        typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
        sys.exit(exc.exit_code)


def run_cli() -> None:
    app()


if __name__ == "__main__":
    run_cli()
