"""
Script: build_tools package
What: Holds the Python build helpers for the router service.
Doing: Groups the image publisher, the project driver, and the shared command runner.
Why: Keeps build and release steps readable and testable instead of spread across ad-hoc scripts.
Goal: Provide one importable home for compiling, testing, and publishing the router.
"""
