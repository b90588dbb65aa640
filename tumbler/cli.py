#!/usr/bin/env python3
"""
TaskTumbler Command Line Interface

Main entry point for the `tumbler` command.

Usage:
    tumbler add "File taxes" --priority High --weight 40
    tumbler list                 # Active tasks, heaviest first
    tumbler complete <task-id>
    tumbler duel                 # Interactive duel session
    tumbler activity --type duel
    tumbler stats
    tumbler --version
"""

import argparse
import asyncio
import json
import sys
import uuid
from pathlib import Path


def _print_json(result):
    print(json.dumps(result, indent=2, default=str))
    return 0 if result.get("success") else 1


def cmd_add(args):
    """Handle add subcommand."""
    from tumbler.tasks.store import create_task

    return _print_json(
        create_task(
            title=args.title,
            category=args.category,
            priority=args.priority,
            weight=args.weight,
            due_date=args.due,
            tags=args.tag,
            people=args.person,
            location=args.location,
        )
    )


def cmd_list(args):
    """Handle list subcommand."""
    from tumbler.duel.presentation import fighter_color, is_urgent
    from tumbler.tasks.store import list_tasks

    result = list_tasks(include_completed=args.all)
    if args.json:
        return _print_json(result)

    tasks = result["data"]["tasks"]
    if not tasks:
        print("No tasks yet. Add one with: tumbler add \"something to do\"")
        return 0

    for task in tasks:
        done = "x" if task["completed"] else " "
        flag = " !" if is_urgent(task) else ""
        print(
            f"[{done}] {task['id']}  w={task['weight']:<5} "
            f"{task['priority']:<6} ({fighter_color(task['priority'])}) {task['title']}{flag}"
        )
    return 0


def cmd_complete(args):
    """Handle complete subcommand."""
    from tumbler.tasks.store import complete_task

    return _print_json(complete_task(args.task_id))


def cmd_delete(args):
    """Handle delete subcommand."""
    from tumbler.tasks.store import delete_task

    return _print_json(delete_task(args.task_id))


def cmd_activity(args):
    """Handle activity subcommand."""
    from tumbler.tasks.store import list_activities

    return _print_json(list_activities(activity_type=args.type, limit=args.limit))


def cmd_stats(args):
    """Handle stats subcommand."""
    from tumbler.tasks.store import get_stats

    return _print_json(get_stats())


def cmd_version(args):
    """Show version information."""
    try:
        from importlib.metadata import version

        v = version("tumbler")
    except Exception:
        v = "0.1.0 (development)"

    print(f"TaskTumbler version {v}")


def cmd_duel(args):
    """Handle duel subcommand."""
    from tumbler.duel.config_models import load_config

    config = load_config(Path(args.config) if args.config else None)
    if args.open:
        config = config.model_copy(update={"enable_weight_classes": False})
    if args.manual:
        config = config.model_copy(update={"duel_auto_advance": False})

    try:
        return asyncio.run(_run_duel(config))
    except KeyboardInterrupt:
        print()
        return 0


def _render_pair(engine):
    from tumbler.duel.presentation import fighter_color, is_urgent, weight_scale

    snapshot = engine.snapshot()
    combo = snapshot["combo"]["count"]
    if combo > 1:
        print(f"  COMBO x{combo}!")
    for slot, task in enumerate(snapshot["fighters"], start=1):
        flag = " (urgent)" if is_urgent(task) else ""
        scale = weight_scale(task.get("weight"), engine.config.weight_max)
        print(
            f"  [{slot}] {task.get('title')}{flag}  "
            f"weight {task.get('weight')}  {fighter_color(task.get('priority'))} x{scale:.2f}"
        )


def _render_outcome(engine):
    outcome = engine.last_outcome
    if outcome is None:
        return
    meta = outcome.activity.get("metadata", {})
    print(
        f"  {meta.get('winner', {}).get('title')} -> {outcome.winner_weight} "
        f"({outcome.winner_change:+d}), "
        f"{meta.get('loser', {}).get('title')} -> {outcome.loser_weight} "
        f"({outcome.loser_change:+d})"
    )
    if engine.xp_display:
        print(f"  {engine.xp_display}")


async def _run_duel(config):
    from tumbler.duel.engine import DuelStateMachine
    from tumbler.duel.models import DuelState
    from tumbler.duel.xp import XP_WINDOW_SECONDS, DuelXpLedger
    from tumbler.logging_config import bind_session, clear_session
    from tumbler.tasks import store

    bind_session(duel_session=uuid.uuid4().hex[:8])

    def notify(message, icon=""):
        print(f"{icon} {message}".strip())

    history = store.recent_duel_times(window_seconds=XP_WINDOW_SECONDS)["data"]["timestamps"]

    engine = DuelStateMachine(
        pool_provider=lambda: store.list_tasks()["data"]["tasks"],
        task_update=store.update_task,
        record_activity=store.record_activity,
        config=config,
        notifier=notify,
        xp_ledger=DuelXpLedger(history=history),
        on_xp_change=store.add_xp,
    )
    loop = asyncio.get_running_loop()

    try:
        engine.start()
        while True:
            if engine.needs_more_tasks or not engine.pair:
                break

            print()
            _render_pair(engine)
            try:
                answer = await loop.run_in_executor(None, input, "Which matters more? [1/2, q] ")
            except EOFError:
                break
            answer = answer.strip().lower()

            if answer in ("q", "quit", "exit"):
                break
            if answer not in ("1", "2"):
                print("  Type 1 or 2.")
                continue

            engine.choose(int(answer) - 1)
            await engine.wait_until_ready()
            _render_outcome(engine)

            if engine.state is DuelState.COMPLETE:
                try:
                    await loop.run_in_executor(None, input, "Enter for the next duel ")
                except EOFError:
                    break
                engine.advance()
    finally:
        engine.close()
        clear_session()

    print(f"\n{engine.rounds_played} duel(s) played.")
    return 0


def main():
    """Main CLI entry point."""
    from tumbler.logging_config import setup_logging

    parser = argparse.ArgumentParser(
        prog="tumbler",
        description="TaskTumbler - gamified task prioritisation",
    )
    parser.add_argument(
        "--version", "-V", action="store_true", help="Show version and exit"
    )
    parser.add_argument(
        "--log-level", default=None, help="Log level (default: $TUMBLER_LOG_LEVEL or WARNING)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Add subcommand
    add_parser = subparsers.add_parser("add", help="Add a task")
    add_parser.add_argument("title", help="What needs doing")
    add_parser.add_argument("--category", default="General")
    add_parser.add_argument(
        "--priority", default="Medium", choices=["Urgent", "High", "Medium", "Low"]
    )
    add_parser.add_argument("--weight", type=float, default=10, help="Starting duel weight")
    add_parser.add_argument("--due", default=None, help="Due date (ISO format)")
    add_parser.add_argument("--tag", action="append", default=None, help="Tag (repeatable)")
    add_parser.add_argument("--person", action="append", default=None, help="Person (repeatable)")
    add_parser.add_argument("--location", default="")
    add_parser.set_defaults(func=cmd_add)

    # List subcommand
    list_parser = subparsers.add_parser("list", help="List tasks")
    list_parser.add_argument("--all", action="store_true", help="Include completed tasks")
    list_parser.add_argument("--json", action="store_true", help="Output raw JSON")
    list_parser.set_defaults(func=cmd_list)

    # Complete / delete subcommands
    complete_parser = subparsers.add_parser("complete", help="Mark a task completed")
    complete_parser.add_argument("task_id")
    complete_parser.set_defaults(func=cmd_complete)

    delete_parser = subparsers.add_parser("delete", help="Delete a task")
    delete_parser.add_argument("task_id")
    delete_parser.set_defaults(func=cmd_delete)

    # Duel subcommand
    duel_parser = subparsers.add_parser("duel", help="Start an interactive duel session")
    duel_parser.add_argument("--config", default=None, help="Path to a duel YAML config")
    duel_parser.add_argument(
        "--open", action="store_true", help="Ignore weight classes, match any two tasks"
    )
    duel_parser.add_argument(
        "--manual", action="store_true", help="Wait for Enter between duels"
    )
    duel_parser.set_defaults(func=cmd_duel)

    # Activity / stats subcommands
    activity_parser = subparsers.add_parser("activity", help="Show recent activity")
    activity_parser.add_argument("--type", default=None, help="Filter by activity type")
    activity_parser.add_argument("--limit", type=int, default=20)
    activity_parser.set_defaults(func=cmd_activity)

    stats_parser = subparsers.add_parser("stats", help="Show XP and duel count")
    stats_parser.set_defaults(func=cmd_stats)

    args = parser.parse_args()
    setup_logging(level=args.log_level)

    # Handle --version at top level
    if args.version:
        cmd_version(args)
        return

    # If no command given, show help
    if not args.command:
        parser.print_help()
        return

    # Execute command
    result = args.func(args)

    # Commands may return an exit code
    if isinstance(result, int) and result != 0:
        sys.exit(result)


if __name__ == "__main__":
    main()
