"""URM Interactive Demo.

A Gradio web interface for running and stepping through URM programs.

Usage:
    cd /path/to/urm
    python demo/gradio_app.py

Features:
    - Write or load URM programs
    - Pass arguments for R1, R2, ...
    - Choose the register memory layout
    - See step-by-step execution trace
    - Inspect final registers in source numbering
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import gradio as gr
from urm import URMMachine
from urm.cli import StepLimitExceeded, format_step, run_bounded
from urm.memory import LAYOUTS, AUTO


# =============================================================================
# Example Programs
# =============================================================================

EXAMPLE_PROGRAMS = {
    "Addition": ("""T(1, 0)      # R0 = a
Z(3)
J(2, 3, 7)   # counter reached b: halt
S(0)
S(3)
J(1, 1, 3)""", "3 4"),

    "Multiplication": ("""Z(0)
Z(3)
J(3, 2, 11)  # b rounds done: halt
Z(4)
J(4, 1, 9)   # added a this round
S(0)
S(4)
J(1, 1, 5)
S(3)
J(1, 1, 3)""", "6 7"),

    "Predecessor": ("""J(1, 0, 8)   # a == 0
S(3)
J(1, 3, 7)
S(2)
S(3)
J(1, 1, 3)
T(2, 0)""", "5"),

    "Copy R2": ("T(2, 0)", "0 7"),

    "Custom": ("", ""),
}

MAX_TRACE_LINES = 100


# =============================================================================
# Execution Functions
# =============================================================================

def parse_arguments(text: str) -> list:
    """Parse whitespace or comma separated natural numbers."""
    values = [int(token) for token in text.replace(",", " ").split()]
    for value in values:
        if value < 0:
            raise ValueError(f"Arguments must be natural numbers, got {value}")
    return values


def run_program(program: str, arguments: str, layout: str, max_steps: int) -> tuple:
    """Execute a URM program and return results.

    Args:
        program: URM source code
        arguments: Values for R1, R2, ... separated by spaces or commas
        layout: 'auto', 'dense' or 'sparse'
        max_steps: Give up after this many steps

    Returns:
        Tuple of (summary_text, trace_text, registers_text)
    """
    if not program.strip():
        return "Error: No program provided", "", ""

    try:
        values = parse_arguments(arguments)
        machine = URMMachine.from_source(program, layout=layout)
    except ValueError as e:
        # ParseError is a ValueError
        return f"Error: {e}", "", ""

    trace_lines = [
        "EXECUTION TRACE",
        "=" * 60,
    ]
    previous = {}

    def record(entry):
        nonlocal previous
        if entry.step <= MAX_TRACE_LINES:
            trace_lines.append(format_step(entry, previous))
        previous = entry.registers

    try:
        run_bounded(machine, values, max_steps=int(max_steps), on_step=record)
    except StepLimitExceeded as e:
        error_msg = str(e)
    else:
        error_msg = None

    summary = machine.get_summary()
    if summary["steps"] > MAX_TRACE_LINES:
        trace_lines.append(f"\n... ({summary['steps'] - MAX_TRACE_LINES} more steps)")
    trace_text = "\n".join(trace_lines)

    # Format summary
    summary_lines = [
        "EXECUTION SUMMARY",
        "=" * 40,
        f"Result: {summary['result'] if summary['halted'] else '-'}",
        f"Steps: {summary['steps']}",
        f"Halted: {'Yes' if summary['halted'] else 'No'}",
        f"Layout: {summary['layout']} ({summary['memory_size']} registers)",
        f"Compacted: {'Yes' if summary['compacted'] else 'No'}",
    ]
    if error_msg:
        summary_lines.append(f"\nRuntime: {error_msg}")
    summary_text = "\n".join(summary_lines)

    # Format registers
    reg_lines = [
        "FINAL REGISTERS",
        "=" * 30,
    ]
    for register, value in summary["registers"].items():
        marker = " *" if value != 0 else ""
        reg_lines.append(f"  R{register}: {value:>10}{marker}")
    registers_text = "\n".join(reg_lines)

    return summary_text, trace_text, registers_text


def load_example(example_name: str) -> tuple:
    """Load an example program and its arguments."""
    return EXAMPLE_PROGRAMS.get(example_name, ("", ""))


# =============================================================================
# Gradio Interface
# =============================================================================

def create_demo():
    """Create and return the Gradio demo interface."""

    with gr.Blocks(title="URM Demo", theme=gr.themes.Soft()) as demo:
        gr.Markdown("""
        # URM: Unlimited Register Machine

        Registers R0, R1, R2, ... hold natural numbers. Arguments go in
        R1..Rk, the result is read from R0 when the program counter leaves
        the program.

        **Pipeline**: `parse -> compact registers -> allocate memory -> run`
        """)

        with gr.Row():
            with gr.Column(scale=2):
                gr.Markdown("### URM Program")

                example_dropdown = gr.Dropdown(
                    choices=list(EXAMPLE_PROGRAMS.keys()),
                    value="Addition",
                    label="Load Example"
                )

                program_input = gr.Textbox(
                    value=EXAMPLE_PROGRAMS["Addition"][0],
                    label="Source Code",
                    lines=15,
                    placeholder="Enter URM instructions here..."
                )

                arguments_input = gr.Textbox(
                    value=EXAMPLE_PROGRAMS["Addition"][1],
                    label="Arguments (R1 R2 ...)"
                )

                gr.Markdown("### Settings")

                with gr.Row():
                    layout_radio = gr.Radio(
                        choices=list(LAYOUTS),
                        value=AUTO,
                        label="Memory Layout",
                        info="auto: dense when registers are tightly packed"
                    )
                    max_steps = gr.Slider(
                        minimum=100,
                        maximum=1000000,
                        value=10000,
                        step=100,
                        label="Max Steps"
                    )

                run_button = gr.Button("Run Program", variant="primary")

            with gr.Column(scale=3):
                with gr.Row():
                    summary_output = gr.Textbox(
                        label="Summary",
                        lines=10,
                        interactive=False
                    )
                    registers_output = gr.Textbox(
                        label="Final Registers",
                        lines=10,
                        interactive=False
                    )

                trace_output = gr.Textbox(
                    label="Execution Trace",
                    lines=20,
                    interactive=False
                )

        with gr.Accordion("Instruction Reference", open=False):
            gr.Markdown("""
            | Instruction | Description | Example |
            |-------------|-------------|---------|
            | `Z(n)` | Set Rn to 0 | `Z(3)` |
            | `S(n)` | Add 1 to Rn | `S(0)` |
            | `T(m, n)` | Copy Rm into Rn | `T(1, 0)` |
            | `J(m, n, q)` | Go to line q if Rm = Rn | `J(2, 3, 7)` |

            **Lines**: numbered from 1; jumping outside the program halts
            **Comments**: `#` to end of line
            """)

        example_dropdown.change(
            fn=load_example,
            inputs=[example_dropdown],
            outputs=[program_input, arguments_input]
        )

        run_button.click(
            fn=run_program,
            inputs=[program_input, arguments_input, layout_radio, max_steps],
            outputs=[summary_output, trace_output, registers_output]
        )

    return demo


# =============================================================================
# Main
# =============================================================================

if __name__ == "__main__":
    demo = create_demo()
    demo.launch(
        share=False,
        server_name="0.0.0.0",
        server_port=7861,
        show_error=True
    )
