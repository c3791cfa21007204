"""Core domain package for slack-github-issues.

Core contains rule matching, the in-flight registry, and the issue filing
pipeline without any Slack SDK or HTTP-specific code, keeping the business
logic portable.
"""
