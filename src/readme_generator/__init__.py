"""
readme-generator: Generate README.md files for git repositories with LLMs.

Scans a local or remote repository, sends its metadata and source files to an LLM
provider (OpenAI, Anthropic, Google Gemini, Azure OpenAI, AWS Bedrock or Ollama) and
renders the structured reply as a README.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
