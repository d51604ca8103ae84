"""Lightweight CLI helpers for inspecting completed interview sessions."""
from __future__ import annotations

import argparse
from typing import Optional, Sequence

from storage.sessions import SqliteSessionRepository


def tail_sessions(limit: int = 20, repository: Optional[SqliteSessionRepository] = None) -> None:
    repo = repository or SqliteSessionRepository()
    for summary in repo.list_completed(limit=limit):
        completed = summary.completed_at.isoformat() if summary.completed_at else "-"
        print(
            f"[{completed}] {summary.session_id} {summary.role} ({summary.difficulty}, {summary.interview_type}) "
            f"score={summary.overall_score:g}/10 pct={summary.percentage_score}%"
        )


def show_stats(repository: Optional[SqliteSessionRepository] = None) -> None:
    repo = repository or SqliteSessionRepository()
    stats = repo.completion_stats()
    print(f"completed={stats.total_interviews} average={stats.average_score}%")


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--tail-sessions", type=int, help="Show the latest completed sessions")
    parser.add_argument("--stats", action="store_true", help="Show completion count and average percentage")
    args = parser.parse_args(argv)

    if args.tail_sessions:
        tail_sessions(args.tail_sessions)
    if args.stats:
        show_stats()


if __name__ == "__main__":
    main()
