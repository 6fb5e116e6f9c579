"""
Task Processing Example

Each task is guarded by a lock derived from its ID, so a task runs at most
once at a time even when several instances pick it up together. An instance
that finds the task locked skips it instead of waiting.

Set DATABASE_URL to run against PostgreSQL; otherwise the in-memory backend
is used.

Run with: python examples/task_processing.py
"""

import asyncio
import os

from pglock import InMemoryLockBackend, LockBackend, PostgreSQLLockBackend, lock_key, open_lock


class TaskAlreadyRunningError(Exception):
    """The task is being processed by another instance."""


def create_backend() -> LockBackend:
    url = os.environ.get("DATABASE_URL")
    if url:
        return PostgreSQLLockBackend.from_url(url, enable_tracing=False)
    return InMemoryLockBackend()


class TaskProcessor:
    def __init__(self, backend: LockBackend, instance_id: str) -> None:
        self._backend = backend
        self.instance_id = instance_id

    async def process(self, task_id: str) -> None:
        key = lock_key(task_id, namespace="task")
        async with await open_lock(self._backend, key, enable_tracing=False) as lock:
            if not await lock.try_lock():
                raise TaskAlreadyRunningError(
                    f"task {task_id} is already being processed by another instance"
                )

            print(f"[{self.instance_id}] Processing task {task_id}...")
            await asyncio.sleep(0.3)
            print(f"[{self.instance_id}] Task {task_id} completed")
            await lock.unlock()


async def process_all(processor: TaskProcessor, task_ids: list[str]) -> None:
    for task_id in task_ids:
        try:
            await processor.process(task_id)
        except TaskAlreadyRunningError as e:
            print(f"[{processor.instance_id}] Skipped: {e}")


async def main() -> None:
    print("Processing tasks...")
    print("Each task runs only once at a time even if two instances try to process it.\n")

    backend = create_backend()
    tasks = ["send-email-123", "process-payment-456", "generate-report-789"]

    first = TaskProcessor(backend, "instance-1")
    second = TaskProcessor(backend, "instance-2")
    await asyncio.gather(process_all(first, tasks), process_all(second, tasks))

    print("\nProcessing a task again after it finished...")
    await first.process(tasks[0])

    if isinstance(backend, PostgreSQLLockBackend):
        await backend.dispose()

    print("\nTask processing example completed!")


if __name__ == "__main__":
    asyncio.run(main())
