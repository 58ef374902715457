"""Bundled skills, subagents, and templates shipped by ``install``.

Each skill is a directory holding ``SKILL.md``; each subagent a directory
holding ``AGENT.md``. Install writes them under the target's ``skills/`` and
``subagents/`` directories and ``doctor`` checks for those marker files.
"""

from __future__ import annotations

from dataclasses import dataclass

from . import templates

SKILL_MARKER = "SKILL.md"
AGENT_MARKER = "AGENT.md"


@dataclass(frozen=True)
class BundledItem:
    name: str
    description: str
    body: str

    def render(self) -> str:
        return f"---\nname: {self.name}\ndescription: {self.description}\n---\n\n{self.body}"


SKILLS = (
    BundledItem(
        "spec-generator",
        "Turn a feature request into a grep-friendly spec before any code is written.",
        """# Spec Generator

1. Read `.claude-sdk/ATLAS.md` and the relevant folder atlases.
2. Check `.claude-sdk/memory/INVARIANTS.md` for constraints the feature must respect.
3. Write the spec with these tagged lines:

GOAL: one sentence
SCOPE: files and folders expected to change
NON_GOAL: explicitly excluded behavior
ACCEPTANCE: observable checks, one per line
RISK: what could break and how it would show

4. Record any architectural choice as an ADR in `.claude-sdk/memory/DECISIONS.md`.
""",
    ),
    BundledItem(
        "code-review",
        "Risk-aware review of a diff against invariants and protected paths.",
        """# Code Review

1. List changed files with `git diff --name-only`.
2. Flag every change under a `PROTECTED:` path from `.claude-sdk/memory/INVARIANTS.md`.
3. For each `INVARIANT:` entry, state whether the diff could violate it.
4. Report findings as:

RISK: high | medium | low
FILE: path
FINDING: what is wrong
FIX: suggested change

Summarize with the highest risk level first.
""",
    ),
    BundledItem(
        "debugging-playbook",
        "Systematic bug investigation: reproduce, isolate, fix, record.",
        """# Debugging Playbook

1. Reproduce: write down the exact command and the observed output.
2. Isolate: bisect inputs, then commits (`git bisect`) when the input is fixed.
3. Hypothesize: one cause at a time, each with a check that would refute it.
4. Fix: smallest change that makes the reproduction pass; add a regression test.
5. Record: add a `SESSION:` entry to `.claude-sdk/memory/TASKS.md`.
""",
    ),
    BundledItem(
        "repo-atlas",
        "Build, refresh, and read the repository atlas.",
        """# Repo Atlas

- `based-claude atlas build` regenerates `.claude-sdk/ATLAS.md` and every folder atlas.
- `based-claude atlas refresh` rewrites only folders touched by recent commits.
- `based-claude atlas status` reports whether the atlas matches the current commit.

Read `ATLAS.md` first, then follow `MAP:` lines to `atlas/<folder>.atlas.md`.
Put architecture notes under `## NOTES`; that section survives rebuilds.
""",
    ),
    BundledItem(
        "search-helper",
        "Grep-based code navigation using atlas search anchors.",
        """# Search Helper

1. Start from `GREP:` lines in `.claude-sdk/ATLAS.md` and the folder atlases.
2. Narrow by folder: `grep -rn "<pattern>" <folder>`.
3. Prefer exact identifiers over fuzzy words; search for definitions before usages.
4. Use `FILE:` and `EXPORT:` lines to pick the first file to open.
""",
    ),
)

SUBAGENTS = (
    BundledItem(
        "planner",
        "Breaks a goal into ordered tasks recorded in TASKS.md.",
        """# Planner

Read the atlas, the contract, and open tasks. Produce a numbered plan where each
step names the files it touches. Write the plan as a `TASK-XXX` entry in
`.claude-sdk/memory/TASKS.md` with STATUS `pending`.
""",
    ),
    BundledItem(
        "reviewer",
        "Reviews finished work against invariants and the contract.",
        """# Reviewer

Apply the code-review skill to the current diff. Block on any violated
`INVARIANT:` or unconfirmed change to a `PROTECTED:` path. Report findings only;
never edit files.
""",
    ),
    BundledItem(
        "indexer",
        "Keeps the repository atlas current.",
        """# Indexer

Run `based-claude atlas status`. When it reports drift, run
`based-claude atlas refresh` (or `atlas build` when folders were added or
removed) and fill in `PURPOSE:` lines that still show a placeholder.
""",
    ),
)

TEMPLATE_FILES = (
    ("ATLAS.md", templates.ATLAS_TEMPLATE),
    ("CONTRACT.md", templates.CONTRACT_TEMPLATE),
    *templates.MEMORY_TEMPLATES,
    ("CLAUDE.md", templates.INSTRUCTIONS_TEMPLATE),
)


__all__ = [
    "AGENT_MARKER",
    "BundledItem",
    "SKILLS",
    "SKILL_MARKER",
    "SUBAGENTS",
    "TEMPLATE_FILES",
]
