"""Main CLI entry point."""

import logging
import sys
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler

from sketch_calc.config import Config, Provider, SurfaceSettings
from sketch_calc.evaluation import EvaluationClient
from sketch_calc.providers.anthropic import AnthropicProvider
from sketch_calc.providers.http import HttpProvider
from sketch_calc.providers.openai import OpenAIProvider
from sketch_calc.replay import load_recording, replay
from sketch_calc.session import Session
from sketch_calc.typesetting import ConsoleTypesetter, HtmlTypesetter, open_typesetter

console = Console(stderr=True)
load_dotenv()


_EVALUATION_OPTIONS = [
    click.option(
        "--provider", "-p",
        type=click.Choice([p.value for p in Provider], case_sensitive=False),
        default=Provider.HTTP.value,
        show_default=True,
        help="Evaluation backend: the remote /calculate service or an LLM vision API.",
    ),
    click.option(
        "--model", "-m",
        default=None,
        help="Model name override for LLM providers.",
    ),
    click.option(
        "--api-url",
        default=None,
        help="Base URL of the evaluation service (overrides SKETCH_CALC_API_URL).",
    ),
    click.option(
        "--api-key",
        default=None,
        help="API key for LLM providers (overrides environment variable).",
    ),
    click.option(
        "--preprocess/--no-preprocess",
        default=False,
        show_default=True,
        help="Flatten the canvas onto its background and sharpen before upload.",
    ),
    click.option(
        "--html", "html_path",
        type=click.Path(dir_okay=False, path_type=Path),
        default=None,
        help="Also write the typeset results to an HTML page rendered with MathJax.",
    ),
    click.option(
        "--show-vars",
        is_flag=True,
        default=False,
        help="Print the variable environment after evaluating.",
    ),
]


def _evaluation_options(func):
    for option in reversed(_EVALUATION_OPTIONS):
        func = option(func)
    return func


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
@click.version_option(package_name="sketch-calc")
def main(verbose):
    """Evaluate handwritten mathematics drawn on a canvas.

    Results are printed to stdout as LaTeX, one expression per line.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@main.command()
@click.argument("image_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@_evaluation_options
def evaluate(image_path, provider, model, api_url, api_key, preprocess, html_path, show_vars):
    """Evaluate the expressions drawn in IMAGE_PATH (.png, .jpg, .webp, ...)."""
    config = _load_config(provider, model, api_key, api_url)
    client = EvaluationClient(_build_provider(config), preprocess=preprocess)

    with open_typesetter(*_typesetters(html_path)) as typesetter:
        with Session.create(
            client, typesetter, history_limit=config.history_limit
        ) as session:
            try:
                session.surface.load_image(image_path.read_bytes())
            except OSError as e:
                console.print(f"[red]Cannot read image:[/red] {e}")
                sys.exit(1)

            with console.status(f"[cyan]Evaluating via {provider}..."):
                ok = session.calculate()
            session.idle()

            if not ok:
                console.print("[red]Evaluation failed.[/red] See the log above.")
                sys.exit(1)
            _report(session, show_vars)


@main.command("replay")
@click.argument("recording_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@_evaluation_options
@click.option(
    "--calculate/--no-calculate",
    default=True,
    show_default=True,
    help="Evaluate the canvas once the recording has been replayed.",
)
@click.option(
    "--save-png",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the canvas to a PNG after replaying (before the final evaluation).",
)
def replay_command(
    recording_path, provider, model, api_url, api_key, preprocess, html_path,
    show_vars, calculate, save_png,
):
    """Replay recorded pointer and keyboard events from RECORDING_PATH."""
    try:
        recording = load_recording(recording_path)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    needs_provider = calculate or any(e.get("type") == "calculate" for e in recording.events)
    if needs_provider:
        config = _load_config(provider, model, api_key, api_url)
        client = EvaluationClient(_build_provider(config), preprocess=preprocess)
        history_limit = config.history_limit
    else:
        client = EvaluationClient(None, preprocess=preprocess)
        history_limit = None

    settings = SurfaceSettings(
        width=recording.width, height=recording.height, offset=recording.offset
    )

    with open_typesetter(*_typesetters(html_path)) as typesetter:
        with Session.create(
            client, typesetter, settings=settings, history_limit=history_limit
        ) as session:
            try:
                replay(session, recording.events)
            except ValueError as e:
                console.print(f"[red]Error:[/red] {e}")
                sys.exit(1)
            console.print(f"[dim]{len(recording.events)} event(s) replayed[/dim]")

            if save_png:
                save_png.write_bytes(session.surface.export_raster())
                console.print(f"[green]Canvas written to {save_png}[/green]")

            if calculate:
                with console.status(f"[cyan]Evaluating via {provider}..."):
                    ok = session.calculate()
                session.idle()
                if not ok:
                    console.print("[red]Evaluation failed.[/red] See the log above.")
                    sys.exit(1)
            _report(session, show_vars)


def _load_config(provider, model, api_key, api_url) -> Config:
    try:
        return Config.from_env(
            provider=Provider(provider),
            model_override=model,
            api_key_override=api_key,
            api_url_override=api_url,
        )
    except RuntimeError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)


def _typesetters(html_path):
    typesetters = [ConsoleTypesetter()]
    if html_path:
        typesetters.append(HtmlTypesetter(html_path))
    return typesetters


def _report(session: Session, show_vars: bool) -> None:
    console.print(f"[dim]{len(session.overlay.history)} result(s)[/dim]")
    if show_vars:
        for name, value in sorted(session.env.get().items()):
            click.echo(f"{name} = {value}")


def _build_provider(config: Config):
    if config.provider == Provider.HTTP:
        return HttpProvider(api_url=config.api_url, timeout=config.timeout)
    elif config.provider == Provider.ANTHROPIC:
        return AnthropicProvider(api_key=config.api_key, model=config.model, timeout=config.timeout)
    elif config.provider == Provider.OPENAI:
        return OpenAIProvider(api_key=config.api_key, model=config.model, timeout=config.timeout)
    else:
        raise ValueError(f"Unknown provider: {config.provider}")
