#!/usr/bin/env python3
"""
Search Tasks CLI Tool
Command-line interface for waiting on search service tasks
and setting up indexes
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

import httpx

from search_tasks import (
    Config,
    IndexFixture,
    IndexOperations,
    SearchClient,
    SearchTaskError,
    SetupFailure,
    TaskInfo,
    TaskUid,
    TaskWaiter,
)
from search_tasks.telemetry import configure_telemetry


class SearchTasksCLI:
    """CLI tool for search service task management"""

    def __init__(
        self,
        url: str = Config.SEARCH_URL,
        api_key: str = Config.SEARCH_API_KEY,
        timeout: float = Config.TASK_TIMEOUT_SECONDS,
        interval: float = Config.TASK_POLL_INTERVAL_SECONDS,
    ):
        self.url = url
        self.api_key = api_key
        self.timeout = timeout
        self.interval = interval

    def _run(self, action, description: str):
        """Run one async action against a fresh client, exit 1 on failure"""
        async def _main():
            client = SearchClient(base_url=self.url, api_key=self.api_key)
            try:
                return await action(client)
            finally:
                await client.aclose()

        try:
            return asyncio.run(_main())
        except SetupFailure as e:
            print(f"❌ {description} failed at step: {e.step_label}")
            print(f"   {e.detail}")
            sys.exit(1)
        except SearchTaskError as e:
            print(f"❌ {description} failed: {e}")
            sys.exit(1)
        except httpx.ConnectError:
            print(f"❌ Error: Cannot connect to {self.url}")
            print("   Make sure the search service is running and accessible")
            sys.exit(1)
        except httpx.HTTPStatusError as e:
            print(f"❌ HTTP Error: {e}")
            print(f"   {e.response.text}")
            sys.exit(1)
        except httpx.HTTPError as e:
            print(f"❌ Error: {e}")
            sys.exit(1)

    def _waiter(self, client: SearchClient) -> TaskWaiter:
        return TaskWaiter(client, timeout=self.timeout, interval=self.interval)

    def _print_task(self, task: TaskInfo):
        icon = {"succeeded": "🟢", "failed": "🔴", "canceled": "⚪"}.get(
            task.status.value, "🟡"
        )
        print(f"   {icon} Task {task.uid}: {task.status.value}")
        if task.type:
            print(f"      Type: {task.type}")
        if task.index_uid:
            print(f"      Index: {task.index_uid}")
        if task.error:
            print(f"      Error: {task.error.as_json()}")

    def show_task(self, task_uid: TaskUid):
        """Show the current snapshot of a task"""
        async def action(client):
            return await self._waiter(client).fetch(task_uid)

        task = self._run(action, f"Fetching task {task_uid}")
        self._print_task(task)

    def wait(self, task_uid: TaskUid):
        """Wait for a task to reach a terminal status"""
        print(f"⏳ Waiting for task {task_uid}...")

        async def action(client):
            return await self._waiter(client).wait(task_uid)

        task = self._run(action, f"Waiting for task {task_uid}")
        self._print_task(task)
        if not task.succeeded:
            sys.exit(1)

    def create_index(self, uid: str, primary_key: Optional[str] = None):
        """Create an index and wait for it"""
        print(f"📦 Creating index {uid}...")

        async def action(client):
            fixture = IndexFixture(
                client, timeout=self.timeout, interval=self.interval
            )
            return await fixture.set_up_empty_index(uid, primary_key)

        self._run(action, f"Creating index {uid}")
        print(f"✅ Index {uid} created")

    def add_documents(
        self, uid: str, path: str, primary_key: Optional[str] = None
    ):
        """Add documents from a JSON file and wait for them"""
        documents = _read_documents(path)
        print(f"📄 Adding {len(documents)} documents to {uid}...")

        async def action(client):
            ops = IndexOperations(client, self._waiter(client))
            return await ops.add_documents(
                uid, documents, primary_key=primary_key, wait=True
            )

        task = self._run(action, f"Adding documents to {uid}")
        self._print_task(task)
        if not task.succeeded:
            sys.exit(1)

    def set_filterable(self, uid: str, attributes: List[str]):
        """Set filterable attributes and wait for them"""
        print(f"⚙️  Setting filterable attributes of {uid}: {attributes}")

        async def action(client):
            ops = IndexOperations(client, self._waiter(client))
            return await ops.update_filterable_attributes(
                uid, attributes, wait=True
            )

        task = self._run(action, f"Updating settings of {uid}")
        self._print_task(task)
        if not task.succeeded:
            sys.exit(1)

    def setup_faceting(self, uid: str, path: str, filterable: List[str]):
        """Add documents then filterable attributes, all or nothing"""
        documents = _read_documents(path)
        print(f"🔧 Setting up {uid} for faceting...")

        async def action(client):
            fixture = IndexFixture(
                client, timeout=self.timeout, interval=self.interval
            )
            return await fixture.set_up_index_for_faceting(
                uid, documents, filterable=filterable
            )

        self._run(action, f"Setting up {uid}")
        print(f"✅ Index {uid} ready for faceting")

    def delete_all(self, force: bool = False):
        """Delete every index"""
        if not force:
            print("⚠️  This will delete every index on the search service.")
            response = input("Are you sure? (y/N): ")
            if response.lower() != 'y':
                print("Deletion cancelled.")
                return

        async def action(client):
            fixture = IndexFixture(
                client, timeout=self.timeout, interval=self.interval
            )
            return await fixture.delete_all_indexes()

        uids = self._run(action, "Deleting indexes")
        print(f"✅ Deleted {len(uids)} index(es)")
        for uid in uids:
            print(f"   - {uid}")


def _task_uid(value: str) -> TaskUid:
    """Task uids are numeric on the service but opaque to this tool"""
    return int(value) if value.isdigit() else value


def _read_documents(path: str) -> list:
    try:
        with open(path, encoding="utf-8") as f:
            documents = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        print(f"❌ Cannot read documents from {path}: {e}")
        sys.exit(1)
    if not isinstance(documents, list):
        print(f"❌ {path} must contain a JSON array of documents")
        sys.exit(1)
    return documents


def main():
    parser = argparse.ArgumentParser(
        description="Search Tasks CLI - Wait on tasks and set up indexes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  search-tasks-cli.py task 42                          # Show task 42
  search-tasks-cli.py wait 42                          # Wait for task 42
  search-tasks-cli.py create-index movies              # Create index
  search-tasks-cli.py add-documents movies movies.json # Add documents
  search-tasks-cli.py set-filterable movies genre      # Filterable attrs
  search-tasks-cli.py setup-faceting movies movies.json --filterable genre
  search-tasks-cli.py delete-all --force               # Delete all indexes
        """
    )

    parser.add_argument(
        "--url",
        default=Config.SEARCH_URL,
        help=f"Search service URL (default: {Config.SEARCH_URL})"
    )
    parser.add_argument(
        "--api-key",
        default=Config.SEARCH_API_KEY,
        help="API key sent as a bearer token"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=Config.TASK_TIMEOUT_SECONDS,
        help=f"Seconds to wait per task (default: {Config.TASK_TIMEOUT_SECONDS})"
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=Config.TASK_POLL_INTERVAL_SECONDS,
        help=f"Seconds between polls (default: {Config.TASK_POLL_INTERVAL_SECONDS})"
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    task_parser = subparsers.add_parser('task', help='Show a task')
    task_parser.add_argument('task_uid', type=_task_uid, help='Task uid')

    wait_parser = subparsers.add_parser('wait', help='Wait for a task to finish')
    wait_parser.add_argument('task_uid', type=_task_uid, help='Task uid')

    create_parser = subparsers.add_parser('create-index', help='Create an index')
    create_parser.add_argument('uid', help='Index uid')
    create_parser.add_argument('--primary-key', help='Primary key')

    add_parser = subparsers.add_parser('add-documents', help='Add documents from a JSON file')
    add_parser.add_argument('uid', help='Index uid')
    add_parser.add_argument('file', help='JSON file holding an array of documents')
    add_parser.add_argument('--primary-key', help='Primary key')

    filterable_parser = subparsers.add_parser('set-filterable', help='Set filterable attributes')
    filterable_parser.add_argument('uid', help='Index uid')
    filterable_parser.add_argument('attributes', nargs='+', help='Attribute names')

    faceting_parser = subparsers.add_parser('setup-faceting', help='Add documents and filterable attributes')
    faceting_parser.add_argument('uid', help='Index uid')
    faceting_parser.add_argument('file', help='JSON file holding an array of documents')
    faceting_parser.add_argument('--filterable', nargs='+', default=['genre'], help='Attribute names')

    delete_parser = subparsers.add_parser('delete-all', help='Delete every index')
    delete_parser.add_argument('--force', action='store_true', help='Skip confirmation')

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    try:
        Config.validate()
    except ValueError as e:
        print(f"❌ Configuration error: {e}")
        sys.exit(1)
    configure_telemetry()

    # Initialize CLI
    cli = SearchTasksCLI(args.url, args.api_key, args.timeout, args.interval)

    # Execute command
    if args.command == 'task':
        cli.show_task(args.task_uid)
    elif args.command == 'wait':
        cli.wait(args.task_uid)
    elif args.command == 'create-index':
        cli.create_index(args.uid, args.primary_key)
    elif args.command == 'add-documents':
        cli.add_documents(args.uid, args.file, args.primary_key)
    elif args.command == 'set-filterable':
        cli.set_filterable(args.uid, args.attributes)
    elif args.command == 'setup-faceting':
        cli.setup_faceting(args.uid, args.file, args.filterable)
    elif args.command == 'delete-all':
        cli.delete_all(force=args.force)

if __name__ == "__main__":
    main()
