from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
import uvicorn

from imageproxy.avatar import AvatarClient, AvatarFetchError, AvatarParameters, build_embed_tag
from imageproxy.exception import ProxyError
from imageproxy.http import HttpClient
from imageproxy.image_generation import ImageGenerationAdapterRegistry
from imageproxy.proxy import ImageGenerationProxy
from imageproxy.settings import ProxySettings

app = typer.Typer(help='Image generation proxy and avatar tools.', no_args_is_help=True)


@app.callback()
def main(verbose: bool = typer.Option(False, '--verbose', '-v', help='Enable debug logging.')) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s %(message)s',
    )


@app.command()
def serve(
    host: str = typer.Option('127.0.0.1', help='Interface to bind.'),
    port: int = typer.Option(8000, help='Port to bind.'),
    reload: bool = typer.Option(False, help='Reload on code changes.'),
) -> None:
    """Run the HTTP proxy."""
    uvicorn.run('imageproxy.app:create_app', factory=True, host=host, port=port, reload=reload)


@app.command()
def generate(
    prompt: str = typer.Argument(..., help='Text prompt.'),
    provider: Optional[str] = typer.Option(None, help=f'One of {list(ImageGenerationAdapterRegistry)}.'),
    width: int = typer.Option(512, help='Requested width, resolved by the provider size policy.'),
    height: Optional[int] = typer.Option(None, help='Requested height, defaults to the width.'),
    output: Path = typer.Option(Path('image.png'), '--output', '-o', help='Where to write the PNG.'),
) -> None:
    """Generate one image in-process and save it."""
    if provider is not None and provider not in ImageGenerationAdapterRegistry:
        raise typer.BadParameter(f'unknown provider {provider}', param_hint='--provider')
    if output.suffix != '.png':
        raise typer.BadParameter('output must be a .png file', param_hint='--output')
    proxy = ImageGenerationProxy.from_settings(ProxySettings(), provider=provider)
    try:
        request = proxy.prepare({'prompt': prompt, 'width': width, 'height': height or width})
        result = proxy.generate(request)
    except ProxyError as e:
        typer.echo(f'error {e.status_code}: {e.message}', err=True)
        if e.details is not None:
            typer.echo(str(e.details), err=True)
        raise typer.Exit(code=1) from e
    result.save_image(output)
    typer.echo(f'saved {output} ({request.size}, {result.source_format})')


@app.command()
def avatar(
    seed: str = typer.Argument('', help='Avatar seed, empty means anon.'),
    style: str = typer.Option('identicon', help='Avatar style.'),
    size: int = typer.Option(512, help='Avatar size in pixels.'),
    background_color: Optional[str] = typer.Option(None, help='Solid background color as hex, transparent when omitted.'),
    output: Optional[Path] = typer.Option(None, '--output', '-o', help='Where to write the SVG.'),
    embed: bool = typer.Option(False, help='Print an <img> embed tag instead of fetching.'),
    retry: bool = typer.Option(False, help='Retry failed fetches with exponential backoff.'),
) -> None:
    """Fetch an SVG avatar, or print its embed tag."""
    client = AvatarClient(http_client=HttpClient(retry=retry))
    parameters = AvatarParameters(
        style=style,
        seed=seed,
        size=size,
        background_type='solid' if background_color else 'transparent',
        background_color=background_color or 'ffffff',
    )
    if embed:
        typer.echo(build_embed_tag(parameters, client.settings.api_base))
        return
    try:
        svg = client.fetch_svg(**parameters.model_dump())
    except AvatarFetchError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1) from e
    output = output or Path(f'{parameters.seed}.svg')
    output.write_text(svg, encoding='utf-8')
    typer.echo(f'saved {output}')


if __name__ == '__main__':
    app()
