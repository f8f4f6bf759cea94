"""Assembler - converts UnitSource IR to Python source text."""

from stencil.compiler.spec import (
    DATA_PARAM,
    FAULT_CLASS,
    FAULT_VAR,
    INDENT,
    LINE_VAR,
    METHODS_PARAM,
    OUT_VAR,
    UNIT_NAME,
    Instruction,
    UnitSource,
)


class Assembler:
    """Assembles a unit function from declarations and body instructions."""

    def assemble(self, unit: UnitSource) -> str:
        """Render a UnitSource to the text of one function definition.

        Layout: declarations (line counter first in debug mode), the
        accumulator, the body (wrapped in a fault-capture block in debug
        mode), then the return of the joined accumulator.

        Args:
            unit: The UnitSource IR to render.

        Returns:
            Python source defining the unit function.
        """
        lines = [f"def {UNIT_NAME}({DATA_PARAM}, {METHODS_PARAM}):"]

        if unit.debug:
            lines.append(f"{INDENT}{LINE_VAR} = 0")
        for binding in unit.bindings:
            lines.append(f"{INDENT}{binding.name} = {binding.expression}")
        lines.append(f"{INDENT}{OUT_VAR} = []")

        base = 1
        if unit.debug:
            lines.append(f"{INDENT}try:")
            base = 2

        body = [self._render_instruction(i, base) for i in unit.body]
        lines.extend(body or [INDENT * base + "pass"])

        if unit.debug:
            lines.append(f"{INDENT}except Exception as {FAULT_VAR}:")
            lines.append(
                f"{INDENT * 2}raise {FAULT_CLASS}({LINE_VAR}) from {FAULT_VAR}"
            )

        lines.append(f"{INDENT}return ''.join({OUT_VAR})")
        lines.append("")

        return "\n".join(lines)

    def _render_instruction(self, instruction: Instruction, base: int) -> str:
        if not instruction.text.strip():
            return ""
        return INDENT * (base + instruction.depth) + instruction.text
