"""Process-management commands over the simulated :class:`ProcessTable`."""

from __future__ import annotations

from simterm.kernel.domain.terminal import ProcessInfo, ProcessStatus
from simterm.kernel.exceptions import ResourceNotFoundError, UsageError
from simterm.stdlib.commands.base import CommandCategory, CommandContext, CommandGroup

group = CommandGroup(CommandCategory.PROCESS)


def _pid(ctx: CommandContext, value: str) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise UsageError(ctx.usage) from e


def _job_target(ctx: CommandContext) -> ProcessInfo | None:
    """Process named by the first argument, or the most recent job."""
    if ctx.args:
        return ctx.processes.get(_pid(ctx, ctx.args[0].lstrip("%")))
    jobs = ctx.processes.jobs()
    return jobs[-1] if jobs else None


@group.command("ps", description="List running processes", usage="ps")
async def ps(ctx: CommandContext) -> None:
    processes = ctx.processes.list()
    if not processes:
        ctx.info("No processes running")
        return
    lines = [f"{'PID':>6} {'STATUS':<11} {'%CPU':>5} {'MEM(MB)':>8} {'PORT':>6}  COMMAND"]
    for process in processes:
        port = str(process.port) if process.port is not None else "-"
        lines.append(
            f"{process.pid:>6} {process.status:<11} {process.cpu_percent:>5.1f} "
            f"{process.memory_mb:>8.1f} {port:>6}  {process.command}"
        )
    ctx.info("\n".join(lines))


@group.command(
    "kill",
    description="Terminate process",
    usage="kill <process-id>",
    examples=("kill 1000", "kill -9 1000"),
)
async def kill(ctx: CommandContext) -> None:
    targets = [arg for arg in ctx.args if not arg.startswith("-")]
    if not targets:
        raise UsageError(ctx.usage)
    pids = [_pid(ctx, target) for target in targets]
    for pid in pids:
        try:
            ctx.processes.kill(pid)
        except ResourceNotFoundError:
            ctx.error(f"Process {pid} not found")
        else:
            ctx.success(f"Process {pid} terminated")


@group.command("bg", description="Resume a job in the background", usage="bg [pid]")
async def bg(ctx: CommandContext) -> None:
    process = _job_target(ctx)
    if process is None:
        ctx.error("bg: current: no such job")
        return
    ctx.processes.set_status(process.pid, ProcessStatus.BACKGROUND)
    ctx.success(f"[{process.pid}]+ {process.command} &")


@group.command("fg", description="Bring a job to the foreground", usage="fg [pid]")
async def fg(ctx: CommandContext) -> None:
    process = _job_target(ctx)
    if process is None:
        ctx.error("fg: current: no such job")
        return
    ctx.processes.set_status(process.pid, ProcessStatus.RUNNING)
    ctx.success(process.command)


@group.command("jobs", description="List background and stopped jobs", usage="jobs")
async def jobs(ctx: CommandContext) -> None:
    listed = ctx.processes.jobs()
    if not listed:
        ctx.info("No jobs running")
        return
    ctx.info(
        "\n".join(
            f"[{process.pid}]  {process.status.title():<11} {process.command}"
            for process in listed
        )
    )


__all__ = ["group"]
