"""Few-shot examples for the implementation prompt.

The example shows the exact JSON shape and escaping the response
interpreter expects.
"""

# =============================================================================
# IMPLEMENTATION EXAMPLES
# =============================================================================

IMPLEMENTATION_EXAMPLES = [
    {
        "task": "Add a reusable Badge component that renders a small rounded label",
        "output": """{
  "analysis": "Create a typed Badge component styled with Tailwind utility classes and a unit test.",
  "files": [
    {
      "path": "src/components/Badge.tsx",
      "action": "create",
      "content": "type BadgeProps = {\\n  label: string;\\n};\\n\\nexport default function Badge({ label }: BadgeProps) {\\n  return <span className=\\"rounded-full bg-gray-100 px-2 text-sm\\">{label}</span>;\\n}\\n",
      "explanation": "Badge component rendering the given label"
    },
    {
      "path": "src/components/Badge.test.tsx",
      "action": "create",
      "content": "import { render, screen } from \\"@testing-library/react\\";\\nimport Badge from \\"./Badge\\";\\n\\ntest(\\"renders label\\", () => {\\n  render(<Badge label=\\"New\\" />);\\n  expect(screen.getByText(\\"New\\")).toBeTruthy();\\n});\\n",
      "explanation": "Render test for the Badge component"
    }
  ],
  "instructions": "No additional setup required"
}""",
    },
]


def format_implementation_examples() -> str:
    """Format implementation examples for prompt."""
    if not IMPLEMENTATION_EXAMPLES:
        return ""

    lines = ["--- EXAMPLE ---"]
    for ex in IMPLEMENTATION_EXAMPLES:
        lines.append(f"Task: {ex['task']}")
        lines.append(f"Expected output:\n{ex['output']}")
    lines.append("--- END EXAMPLE ---")
    return "\n".join(lines)
