"""repodiagram.

An LLM-powered tool that scans a local repository and generates a
Mermaid.js architecture diagram using the Anthropic Claude API.
"""

__version__ = "0.1.0"
