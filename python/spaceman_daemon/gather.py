import asyncio


async def gather(*coros_or_futures, batch_size=None):
  """
  Run all awaitables concurrently and return their results in input order.

  Unlike asyncio.gather, the first failure cancels every awaitable that is
  still running before the exception is raised, so a failed stage leaves no
  calls behind.

  Args:
    *coros_or_futures: Coroutines or futures to execute
    batch_size: Optional maximum number of concurrent tasks. If None, all tasks run concurrently.

  Returns:
    List of results in the same order as the input coroutines/futures.
  """
  if not coros_or_futures:
    return []

  if batch_size:
    sem = asyncio.Semaphore(batch_size)

    async def batch_task(f):
      async with sem:
        return await f

    coros_or_futures = [batch_task(f) for f in coros_or_futures]

  tasks = [asyncio.ensure_future(f) for f in coros_or_futures]
  try:
    done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
  except asyncio.CancelledError:
    for task in tasks:
      task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)
    raise

  if pending:
    for task in pending:
      task.cancel()
    await asyncio.gather(*pending, return_exceptions=True)

  for task in tasks:
    if task.done() and not task.cancelled() and task.exception() is not None:
      raise task.exception()

  return [task.result() for task in tasks]
