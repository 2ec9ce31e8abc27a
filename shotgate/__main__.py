import asyncio
import logging
import mimetypes
from pathlib import Path

import click

from shotgate.api.classification_client import ClassificationClient
from shotgate.errors import ValidationError
from shotgate.logging import SHOTGATE_LOGGER
from shotgate.session.lifecycle_controller import UploadLifecycleController
from shotgate.session.upload_session import SelectedFile
from shotgate.settings import ShotGateSettings


def _apply_log_level(level: str):
    SHOTGATE_LOGGER.setLevel(getattr(logging, level.upper(), logging.INFO))


@click.group()
def cli():
    """ShotGate photo quality gate."""


@cli.command()
@click.option("--host", default=None, help="Interface to bind (default: 127.0.0.1)")
@click.option("--port", default=None, type=int, help="Port to listen on (default: 3000)")
@click.option("--log-level", default=None, help="Set logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)")
@click.option("--config", "config_file", default=None, type=click.Path(path_type=Path), help="JSON config file")
def serve(host, port, log_level, config_file):
    """Run the classification / persistence web service."""
    import uvicorn

    from shotgate.web.app import ShotGateWebApp

    settings = ShotGateSettings.load(config_file, web_host=host, web_port=port, log_level=log_level)
    _apply_log_level(settings.log_level)
    web_app = ShotGateWebApp(settings)
    SHOTGATE_LOGGER.info(f"Starting ShotGate service on http://{settings.web_host}:{settings.web_port}")
    uvicorn.run(web_app.app, host=settings.web_host, port=settings.web_port, log_level=settings.log_level.lower())


async def _check(settings: ShotGateSettings, upload: SelectedFile, offline: bool):
    classifier = None if offline else ClassificationClient.from_settings(settings)
    controller = UploadLifecycleController(settings, classifier=classifier)
    try:
        await controller.select_file("check", upload)
        return controller.get_session("check").to_dict()
    finally:
        controller.close()
        if classifier is not None:
            await classifier.aclose()


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--service-url", default=None, help="Classification service base URL")
@click.option("--offline", is_flag=True, default=False, help="Skip the remote classification (heuristic only)")
@click.option("--timeout", default=None, type=float, help="Remote classification timeout in seconds")
@click.option("--config", "config_file", default=None, type=click.Path(path_type=Path), help="JSON config file")
def check(file, service_url, offline, timeout, config_file):
    """Run FILE through the full upload lifecycle and print the result."""
    settings = ShotGateSettings.load(config_file, service_url=service_url, request_timeout_seconds=timeout)
    _apply_log_level(settings.log_level)
    content_type, _ = mimetypes.guess_type(file.name)
    upload = SelectedFile(filename=file.name, content_type=content_type, data=file.read_bytes())

    try:
        result = asyncio.run(_check(settings, upload, offline))
    except ValidationError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"state:  {result['state']}")
    click.echo(f"hint:   {result['hint'] or ''}")
    metrics = result["metrics"]
    if metrics:
        for name, value in metrics.items():
            click.echo(f"{name}: {value:.4f}")


if __name__ == "__main__":
    cli()
