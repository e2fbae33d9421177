"""Descriptions of the host-exposed context tools."""

SQUASH_TOOL_SPEC = """**Purpose:** Collapse a contiguous range of conversation into a single summary.
**Use When:**
- Task complete: squash the entire sequence (research, tool calls, implementation) into a summary
- Exploration done: multiple files/commands explored, only the conclusions matter
- Failed attempts: condense unsuccessful approaches into a brief note
- Verbose output: a section has grown large but can be summarized
**Do NOT Use When:**
- You need specific details (exact code, file contents, error messages from the range)
- Individual tool outputs: squash targets conversation ranges, use `prune` for single outputs
- Recent content: you may still need it for the current task
**How It Works:**
1. `startString`: unique text marking the range start
2. `endString`: unique text marking the range end
3. `topic`: short label (3-5 words)
4. `summary`: replacement text
5. Everything between (inclusive) is removed and the summary inserted
- The squash FAILS if `startString` or `endString` is not found in the conversation, with the error "startString/endString not found in conversation".
- The squash FAILS if `startString` or `endString` is found in multiple messages, with the error "Found multiple matches for startString/endString". Provide a larger string with more surrounding context to uniquely identify the intended match.
**Best Practices:**
- Write concise topics: "Auth System Exploration", "Token Logic Refactor"
- Write comprehensive summaries with the key information
- Best after finishing a work phase, not during active exploration
**Format:**
- `input`: [startString, endString, topic, summary]
**Example:**
    Conversation: [Asked about auth] -> [Read 5 files] -> [Analyzed patterns] -> [Found "JWT tokens with 24h expiry"]
    input: [
      "Asked about authentication",
      "JWT tokens with 24h expiry",
      "Auth System Exploration",
      "Auth: JWT 24h expiry, bcrypt passwords, refresh rotation. Files: auth.py, tokens.py, middleware/auth.py"
    ]
"""

PRUNE_TOOL_SPEC = """Remove tool outputs you no longer need from the context.

Pass the numeric ids shown in the `<prunable-tools>` list. The first
element may be a reason: "completion" (task finished), "noise"
(irrelevant output) or "extraction" (you already extracted what you
need). Pruned outputs are replaced by a short placeholder.

Example: ["noise", "3", "7", "12"]
"""
