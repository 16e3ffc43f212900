"""
brand-facts core package.

Modules
───────
models     — Pydantic data models (Fact, FactList, Brand, fragments)
errors     — Error taxonomy (InvalidInputError, ApiError, …)
formatter  — Source text → text/link fragments, safe HTML rendering
model      — Claude + web_search tool: structured-output model boundary
facts      — Validate → resolve brand name → generate facts pipeline
forms      — Brand form inline validation
state      — Idle / Loading / Success / Failure display state
"""
