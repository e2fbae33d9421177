"""Static instruction text injected into outbound requests."""

SYSTEM_PROMPT = """<context-management>
This environment manages your context window. Tool outputs you no longer
need can be removed with the `prune` tool, and finished stretches of work
can be collapsed into a summary with the `squash` tool.

- A `<prunable-tools>` list may appear with numeric ids for tool calls
  that are eligible for pruning. The ids are stable for the session.
- Pruned outputs are replaced by a short placeholder. Do not rely on
  content you have pruned; extract what you need first.
- Prefer squashing completed phases over pruning single outputs when a
  whole exploration is finished.
</context-management>"""

NUDGE_INSTRUCTION = """<context-reminder>
Several tool results have accumulated since your last context cleanup.
Review the conversation: prune outputs you no longer need, or squash a
finished phase of work into a summary, before continuing.
</context-reminder>"""
