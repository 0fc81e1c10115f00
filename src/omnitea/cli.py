"""Main CLI entry point."""

import sys
import tempfile
from pathlib import Path

import click
from dotenv import load_dotenv
from loguru import logger
from rich.console import Console

from omnitea.bot import OmniteaBot
from omnitea.config import MAX_CONTEXT_TOKENS, Config, Provider
from omnitea.log import LEVELS, setup_logging
from omnitea.pdf import DEFAULT_DPI
from omnitea.postprocessing import normalize_latex_delimiters
from omnitea.providers.anthropic import AnthropicProvider
from omnitea.providers.openai import OpenAIProvider
from omnitea.render import Renderer
from omnitea.typeset import RenderError

console = Console(stderr=True)
load_dotenv()


@click.group(invoke_without_command=True)
@click.option(
    "--provider", "-p",
    type=click.Choice(["openai", "anthropic"], case_sensitive=False),
    default="openai",
    show_default=True,
    help="LLM provider that writes the replies.",
)
@click.option(
    "--model", "-m",
    default=None,
    help="Model name override (defaults to the provider's chat model).",
)
@click.option(
    "--api-key",
    default=None,
    help="LLM API key (overrides environment variable).",
)
@click.option(
    "--discord-token",
    default=None,
    help="Discord bot token (overrides DISCORD_TOKEN).",
)
@click.option(
    "--channel",
    default=None,
    help="Server channel to answer in (overrides CHANNEL_NAME; default: omnitea).",
)
@click.option(
    "--prompt-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="System prompt file (overrides PROMPT_FILE).",
)
@click.option(
    "--max-context-tokens",
    default=MAX_CONTEXT_TOKENS,
    show_default=True,
    help="Token budget for the conversation sent to the model.",
)
@click.option(
    "--work-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for rendered images. Defaults to the system temp dir.",
)
@click.option(
    "--log-level",
    type=click.Choice(LEVELS, case_sensitive=False),
    default="DEBUG",
    show_default=True,
)
@click.version_option(package_name="omnitea")
@click.pass_context
def main(
    ctx, provider, model, api_key, discord_token, channel, prompt_file,
    max_context_tokens, work_dir, log_level,
):
    """Run the omnitea Discord bot.

    Replies that contain LaTeX math are typeset with pandoc and sent as images.
    """
    setup_logging(log_level)
    if ctx.invoked_subcommand is not None:
        return

    try:
        config = Config.from_env(
            provider=Provider(provider.lower()),
            model_override=model,
            api_key_override=api_key,
            discord_token_override=discord_token,
            channel_override=channel,
            prompt_file_override=prompt_file,
            max_context_tokens=max_context_tokens,
            work_dir=work_dir,
        )
    except RuntimeError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    logger.info(
        "Starting with {} ({}), channel #{}", config.provider.value, config.model, config.channel_name
    )
    bot = OmniteaBot(
        config=config,
        provider=_build_provider(config),
        render=Renderer(config.work_dir),
    )
    bot.run(config.discord_token, log_handler=None)


@main.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--output-dir", "-o",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Where to write the PNGs. Defaults to a new temporary directory.",
)
@click.option(
    "--dpi",
    default=DEFAULT_DPI,
    show_default=True,
    help="Rasterization resolution.",
)
@click.option(
    "--negate/--no-negate",
    default=True,
    show_default=True,
    help="Invert colours for dark chat themes.",
)
@click.option(
    "--keep-intermediates",
    is_flag=True,
    default=False,
    help="Keep the generated .md and .pdf next to the images.",
)
def render(input_path, output_dir, dpi, negate, keep_intermediates):
    """Typeset a markdown file the way the bot does and print the image paths."""
    output_dir = output_dir or Path(tempfile.mkdtemp(prefix="omnitea-"))
    renderer = Renderer(
        output_dir, dpi=dpi, negate=negate, keep_intermediates=keep_intermediates
    )
    markdown = normalize_latex_delimiters(input_path.read_text(encoding="utf-8"))

    try:
        with console.status("[cyan]Typesetting with pandoc..."):
            paths = renderer.render(markdown)
    except RenderError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    console.print(f"[dim]{len(paths)} page(s) rendered[/dim]")
    for path in paths:
        click.echo(str(path))


def _build_provider(config: Config):
    if config.provider == Provider.OPENAI:
        return OpenAIProvider(api_key=config.api_key, model=config.model)
    elif config.provider == Provider.ANTHROPIC:
        return AnthropicProvider(api_key=config.api_key, model=config.model)
    else:
        raise ValueError(f"Unknown provider: {config.provider}")
