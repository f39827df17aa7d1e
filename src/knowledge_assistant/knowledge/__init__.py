"""Knowledge store access, learning, feedback and re-verification.

Submodules:
- store: shared queries (visibility scoping, usage tracking, purge)
- mutation: learn / merge-on-write of taught and external answers
- feedback: confidence updates from user feedback
- history: conversation records
- reverification: bulk refresh of potentially outdated answers
"""
