"""Test-runner commands. Every run reports success; ``pytest`` counts test modules."""

from __future__ import annotations

from simterm.stdlib.commands.base import CommandCategory, CommandContext, CommandGroup

group = CommandGroup(CommandCategory.TEST)


def _test_modules(ctx: CommandContext) -> list[str]:
    return [
        entry.name
        for entry in ctx.vfs.walk(ctx.state.cwd)
        if entry.is_file
        and entry.name.endswith(".py")
        and (entry.name.startswith("test_") or entry.name.endswith("_test.py"))
    ]


def _runner(name: str, label: str, description: str) -> None:
    @group.command(name, description=description, usage=f"{name} [pattern]")
    async def handler(ctx: CommandContext) -> None:
        ctx.success(f"{label} tests completed successfully")


@group.command(
    "test", description="Run project tests", usage="test [pattern]", examples=("test",)
)
async def test(ctx: CommandContext) -> None:
    ctx.success("Running tests...\nAll tests passed ✓")


_runner("jest", "Jest", "JavaScript testing framework")
_runner("mocha", "Mocha", "JavaScript test framework")
_runner("vitest", "Vitest", "Vite-native testing framework")
_runner("cypress", "Cypress", "End-to-end testing")


@group.command("pytest", description="Python testing framework", usage="pytest [path]")
async def pytest(ctx: CommandContext) -> None:
    modules = _test_modules(ctx)
    if not modules:
        ctx.warning("===== no tests ran in 0.01s =====")
        return
    ctx.success(
        f"collected {len(modules)} items\n\n===== {len(modules)} passed in 0.42s ====="
    )


__all__ = ["group"]
