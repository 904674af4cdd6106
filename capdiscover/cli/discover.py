import logging
import click

from ..config import load_config
from ..errors import DiscoveryError
from ..runtime import create_runtime

config_option = click.option(
    "--config", "config_path", default=None, type=click.Path(exists=True, dir_okay=False),
    help="JSON config file (defaults to $CAPDISCOVER_CONFIG)",
)


def _runtime(config_path):
    try:
        return create_runtime(load_config(config_path))
    except DiscoveryError as exc:
        raise click.ClickException(str(exc)) from exc


@click.group()
def main() -> None:
    pass


@main.command("list")
@config_option
def list_capabilities(config_path) -> None:
    """List capabilities, their candidate order and other known providers."""
    rt = _runtime(config_path)
    for name in rt.capabilities():
        packages = rt.capability(name).candidates().packages()
        click.echo(f"{name}: {', '.join(packages) if packages else '(no candidates)'}")
        manual = [c.package for c in rt.known_candidates(name) if c.package not in packages]
        if manual:
            click.echo(f"  not built automatically: {', '.join(manual)}")


@main.command()
@config_option
@click.argument("name")
def explain(config_path, name: str) -> None:
    """Show how NAME would be resolved."""
    rt = _runtime(config_path)
    try:
        registry = rt.capability(name)
        report = registry.explain()
    except DiscoveryError as exc:
        raise click.ClickException(str(exc)) from exc
    winner = None
    for row in report:
        mark = "ok" if row["satisfied"] else "--"
        click.echo(f"[{mark}] {row['package']} {row['constraint']} (installed: {row['installed'] or 'no'})")
        if winner is None and row["satisfied"]:
            winner = row["package"]
    click.echo(f"winner: {winner or 'none'}")


@main.command()
@config_option
@click.option("-v", "--verbose", is_flag=True)
@click.option("--port", default=8766, type=int)
def serve(config_path, verbose: bool, port: int) -> None:
    """Serve the admin API."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO)
    rt = _runtime(config_path)
    from ..admin_api import create_app
    import uvicorn

    uvicorn.run(create_app(rt), host="127.0.0.1", port=port)


if __name__ == "__main__":
    main()
