"""Seed documents written by ``init`` and ``install --project``.

Every template is grep-friendly markdown: one ``TAG: value`` fact per line so
agents can locate entries with plain substring search.
"""

from __future__ import annotations

from .atlas.render import ROOT_PURPOSE_PLACEHOLDER, UNBUILT_MARKER

ATLAS_TEMPLATE = f"""\
# REPO ATLAS
# Human-editable codebase index for agent orientation
# Run 'based-claude atlas build' to auto-generate, or edit manually

BUILT: {UNBUILT_MARKER}
COMMIT: unknown
TYPE: unknown

## OVERVIEW

PROJECT: [Project name]
PURPOSE: {ROOT_PURPOSE_PLACEHOLDER}

## ENTRY POINTS

# Primary entry points for understanding this codebase:
ENTRY: [main entry file]

## MAJOR DOMAINS

# Top-level organization:
DOMAIN: src/           # [description]

## ARCHITECTURE

# Key architectural decisions:
# - [Decision 1]
# - [Decision 2]

## SEARCH ANCHORS

# Useful grep patterns:
GREP: "TODO|FIXME" - Find todos
GREP: "export (function|const|class)" - Find exports

## NOTES

Add architectural notes, gotchas, or important context here.
This section is preserved across atlas rebuilds.
"""

DECISIONS_TEMPLATE = """\
# Decision Memory (ADRs)
# Lightweight Architecture Decision Records
# Format: grep-friendly, human-editable

## Active Decisions

### ADR-001: [Title]

STATUS: proposed | accepted | deprecated | superseded
DATE: YYYY-MM-DD
CONTEXT: [Why this decision was needed]
DECISION: [What was decided]
ALTERNATIVES: [What else was considered]
CONSTRAINTS: [What limitations affected the decision]
REVISIT_IF: [Conditions that would trigger reconsideration]

---

## Decision Index

# Quick reference for all decisions:
ADR: 001 - [Title] - STATUS

## Templates

<!-- Copy this template for new decisions:

### ADR-XXX: [Title]

STATUS: proposed
DATE: YYYY-MM-DD
CONTEXT:
DECISION:
ALTERNATIVES:
CONSTRAINTS:
REVISIT_IF:

-->
"""

INVARIANTS_TEMPLATE = """\
# Invariants & Guardrails Registry
# Safety constraints that agents must respect
# Format: explicit, simple language, grep-friendly

## Critical Invariants

# These MUST NOT be violated by any agent action:

INVARIANT: [ID] [Description]
REASON: [Why this matters]
ENFORCED_BY: [How it's enforced - tests, CI, manual review]

### Example Invariants

INVARIANT: AUTH-001 All authentication logic lives in src/auth/
REASON: Security audit scope, single point of control
ENFORCED_BY: Code review, architectural tests

INVARIANT: DB-001 Database writes must go through repository layer
REASON: Transaction management, audit logging
ENFORCED_BY: Linting rules, code review

INVARIANT: API-001 All external API calls must include timeout
REASON: Prevent cascade failures
ENFORCED_BY: Custom lint rule

## Soft Constraints

# Strong preferences that can be overridden with justification:

PREFER: [Description]
INSTEAD_OF: [Anti-pattern]
BECAUSE: [Reasoning]

## Protected Paths

# Files/directories that require extra scrutiny before modification:

PROTECTED: src/auth/          # Security-critical
PROTECTED: src/billing/       # Financial logic
PROTECTED: migrations/        # Database schema

## Guardrail Index

# Quick reference:
GUARD: AUTH-001 - Auth in src/auth/ only
GUARD: DB-001 - Writes through repository
GUARD: API-001 - Timeouts on external calls
"""

TASKS_TEMPLATE = """\
# Task & Progress Memory
# Multi-session task tracking for agents
# Format: grep-friendly, agent-updatable, human-editable

## Active Tasks

### TASK-001: [Title]

STATUS: pending | in_progress | blocked | completed
GOAL: [What needs to be accomplished]
STARTED: YYYY-MM-DD
UPDATED: YYYY-MM-DD

FILES_TOUCHED:
- [file1]
- [file2]

PROGRESS:
- [x] Step 1
- [ ] Step 2
- [ ] Step 3

BLOCKERS:
- [Any blocking issues]

OPEN_QUESTIONS:
- [Questions needing answers]

NEXT_STEPS:
- [Immediate next actions]

---

## Task Index

# Quick reference:
TASK: 001 - [Title] - STATUS

## Completed Tasks

# Move completed tasks here for reference

---

## Session Log

# Brief notes from each work session:

SESSION: YYYY-MM-DD HH:MM
WORKED_ON: TASK-XXX
SUMMARY: [What was accomplished]
NEXT: [What to do next]

"""

CONTRACT_TEMPLATE = """\
# Claude Contract
# Explicit agreement between humans and agents
# Referenced by skills and subagents

## Permissions

### Autonomous Actions

# Claude MAY do these without asking:
ALLOW: Read any file in the repository
ALLOW: Run tests
ALLOW: Run linters and formatters
ALLOW: Create files in designated directories
ALLOW: Edit files to fix bugs or implement requested features

### Requires Confirmation

# Claude MUST ask before doing these:
CONFIRM: Delete files
CONFIRM: Modify configuration files
CONFIRM: Run commands that affect external systems
CONFIRM: Make breaking API changes
CONFIRM: Modify security-related code
CONFIRM: Push to remote repositories

### Prohibited Actions

# Claude must NEVER do these:
DENY: Commit directly to main branch
DENY: Modify .env or secrets files
DENY: Run destructive database commands
DENY: Access external services without explicit permission

## Style Preferences

### Code Style

STYLE: Follow existing patterns in the codebase
STYLE: Prefer explicit over clever
STYLE: Add comments only when logic isn't self-evident
STYLE: Match existing formatting conventions

### Communication Style

COMM: Be concise
COMM: Explain reasoning for non-obvious decisions
COMM: Ask before large refactors
COMM: Summarize changes after completing tasks

## Safety Preferences

SAFETY: Always create backups before destructive operations
SAFETY: Run tests before marking tasks complete
SAFETY: Review INVARIANTS.md before modifying protected paths
SAFETY: Check for breaking changes in public APIs

## Project-Specific Rules

# Add custom rules for this project:
# RULE: [Description]

"""

INSTRUCTIONS_TEMPLATE = """\
# Claude Code Instructions

This project uses the **Based Claude** memory layer.

## On Session Start

1. **Read `.claude-sdk/ATLAS.md`** to orient yourself to the codebase
2. **Check `.claude-sdk/memory/TASKS.md`** for any in-progress work
3. **Review `.claude-sdk/CONTRACT.md`** for permissions and constraints

## Before Modifying Code

1. **Check `.claude-sdk/memory/INVARIANTS.md`** for safety constraints
2. Respect all `INVARIANT:` and `PROTECTED:` entries
3. If touching a protected path, mention it explicitly

## During Work

### Task Tracking

When working on tasks, update `.claude-sdk/memory/TASKS.md`:
- Set STATUS to `in_progress` when starting
- Add files to `FILES_TOUCHED` as you modify them
- Update `PROGRESS` checkboxes as you complete steps
- Set STATUS to `completed` when done
- For multi-session work, add a `SESSION:` log entry

### Decision Recording

When making architectural decisions, add an ADR to `.claude-sdk/memory/DECISIONS.md`:
- Use format: `ADR-XXX: [Title]`
- Include STATUS, CONTEXT, DECISION, ALTERNATIVES

### Atlas Maintenance

After significant structural changes:
- Note that atlas may need refresh
- Run `based-claude atlas refresh` if available

## Permissions (from CONTRACT.md)

**Autonomous** (no confirmation needed):
- Read any file
- Run tests and linters
- Edit files for requested changes

**Requires confirmation**:
- Deleting files
- Modifying configuration
- Changes to PROTECTED paths

**Prohibited**:
- Direct commits to main
- Modifying .env or secrets
- Violating INVARIANTS.md

## Quick Reference

```
.claude-sdk/
├── ATLAS.md              # READ FIRST - codebase overview
├── CONTRACT.md           # Your permissions
├── atlas/                # Per-folder details
└── memory/
    ├── DECISIONS.md      # Record decisions here
    ├── INVARIANTS.md     # CHECK BEFORE EDITS
    └── TASKS.md          # Track work here
```

## Available Skills

- **spec-generator**: Create specs/PRDs before implementation
- **code-review**: Risk-aware code review
- **debugging-playbook**: Systematic bug investigation
- **repo-atlas**: Build/refresh codebase atlas
- **search-helper**: Grep-based code navigation
"""

SDK_GITIGNORE = """\
# based-claude
# By default, memory files are NOT ignored (they should be versioned)
# Uncomment below to exclude specific files from version control

# .backups/
# *.bak
"""

SKILLFILE_TEMPLATE = """\
{
  "skills": [
  ]
}
"""

SETTINGS_TEMPLATE = """\
{
    "permissions": {
        "allow": [],
        "deny": []
    }
}
"""

MEMORY_TEMPLATES = (
    ("DECISIONS.md", DECISIONS_TEMPLATE),
    ("INVARIANTS.md", INVARIANTS_TEMPLATE),
    ("TASKS.md", TASKS_TEMPLATE),
)


__all__ = [
    "ATLAS_TEMPLATE",
    "CONTRACT_TEMPLATE",
    "DECISIONS_TEMPLATE",
    "INSTRUCTIONS_TEMPLATE",
    "INVARIANTS_TEMPLATE",
    "MEMORY_TEMPLATES",
    "SDK_GITIGNORE",
    "SETTINGS_TEMPLATE",
    "SKILLFILE_TEMPLATE",
    "TASKS_TEMPLATE",
]
