"""
Playroom CLI - Command-line interface for the shell.

Usage:
    playroom list                          List activities
    playroom play <activity_id>            Run an activity headless on a virtual clock
    playroom mute {on,off,toggle,status}   Read or change the persisted mute flag
    playroom serve                         Run the HTTP remote shell
"""

import argparse
import random
import sys

from .config import ShellConfig, configure_logging


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Playroom - Children's activity shell",
        prog="playroom",
    )
    parser.add_argument("--log-level", help="Logging level (default: PLAYROOM_LOG_LEVEL or INFO)")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # List command
    subparsers.add_parser("list", help="List activities")

    # Play command
    play_parser = subparsers.add_parser("play", help="Run an activity headless")
    play_parser.add_argument("activity_id", help="Activity to start")
    play_parser.add_argument("--seconds", type=float, default=10.0, help="Virtual seconds to run")
    play_parser.add_argument("--seed", type=int, help="Random seed for reproducible layouts")

    # Mute command
    mute_parser = subparsers.add_parser("mute", help="Read or change the mute flag")
    mute_parser.add_argument("action", choices=["on", "off", "toggle", "status"], nargs="?", default="status")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP remote shell")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port")

    args = parser.parse_args(argv)

    config = ShellConfig.from_env()
    configure_logging(args.log_level or config.log_level)

    if args.command == "list":
        cmd_list(args, config)
    elif args.command == "play":
        cmd_play(args, config)
    elif args.command == "mute":
        cmd_mute(args, config)
    elif args.command == "serve":
        cmd_serve(args, config)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_list(args, config):
    """List activities."""
    from .shell import Playroom

    shell = Playroom.create(config)
    for info in shell.activities():
        print(f"{info['icon']}  {info['activity_id']:<16} {info['name']}")


def cmd_play(args, config):
    """Run an activity on the virtual clock and print what it produced."""
    from .errors import ActivityNotFound
    from .runtime import ManualScheduler
    from .services import (
        Announcer,
        CuePlayer,
        JsonFileStorage,
        ParticleEffect,
        Services,
        Store,
    )
    from .shell import Playroom

    scheduler = ManualScheduler(frame_interval_ms=config.frame_interval_ms)

    def at():
        return f"[{scheduler.now() / 1000:7.3f}s]"

    store = Store(JsonFileStorage(config.state_file))
    services = Services(
        audio=CuePlayer(store=store, sink=lambda kind: print(f"{at()} cue    {kind.value}")),
        voice=Announcer(store=store, sink=lambda text: print(f"{at()} speak  {text}")),
        effects=ParticleEffect(
            config.surface_width,
            config.surface_height,
            sink=lambda b: print(f"{at()} burst  {b.count} at ({b.x:.0f}, {b.y:.0f})"),
        ),
    )
    rng = random.Random(args.seed) if args.seed is not None else None
    shell = Playroom.create(config, scheduler=scheduler, store=store, services=services, rng=rng)

    try:
        result = shell.start(args.activity_id)
    except ActivityNotFound as e:
        print(f"Error: {e}")
        print("Run 'playroom list' to see the available activities.")
        sys.exit(1)

    if not result.success:
        print(f"Error: {'; '.join(result.errors)}")
        sys.exit(1)

    shell.scheduler.advance(args.seconds * 1000)
    status = shell.status()
    print(f"\nAfter {args.seconds:g}s: {len(shell.surface.snapshot_tree())} elements, "
          f"{status['outstanding_resources']} resources held")

    shell.show_menu()
    print(f"Back to menu: {shell.status()['outstanding_resources']} resources held")


def cmd_mute(args, config):
    """Read or change the persisted mute flag."""
    from .services import JsonFileStorage, Store

    store = Store(JsonFileStorage(config.state_file))
    if args.action == "on":
        store.set(is_muted=True)
    elif args.action == "off":
        store.set(is_muted=False)
    elif args.action == "toggle":
        store.set(is_muted=not store.is_muted)
    print(f"Sound is {'muted' if store.is_muted else 'on'} ({config.state_file})")


def cmd_serve(args, config):
    """Run the HTTP remote shell."""
    import uvicorn

    from .api import create_app

    app = create_app(config=config)
    uvicorn.run(app, host=args.host, port=args.port, log_level=config.log_level.lower())


if __name__ == "__main__":
    main()
