"""Prompt templates and context builders for Gemini calls.

Model name stored as constant for preview model management. Character
budgets keep every prompt bounded regardless of transcript length.
"""

from mollymemo.models.content import RepoInfo
from mollymemo.models.item import RepoMetadata, SourceKind

# Gemini model constant -- update here when a newer stable version releases
GEMINI_MODEL = "gemini-2.5-flash"

CLASSIFY_TEXT_BUDGET = 3000
PROPOSE_TEXT_BUDGET = 3000
VERIFY_TEXT_BUDGET = 2000

_CLASSIFY_PROMPT = """\
Analyze this content and classify it.

{context}

Return a JSON object with:
- title: A concise title (max 60 chars). For repos, use the repo name. For techniques, describe the technique.
- summary: One sentence summary (max 150 chars) of what this is and why it's useful.
- domain: One of "vibe-coding", "ai-filmmaking", or "other". Pick "vibe-coding" for anything related to \
software development, AI coding tools, developer productivity. Pick "ai-filmmaking" for anything related \
to video generation, AI video, filmmaking with AI.
- content_type: One of "repo", "technique", "tool", "resource", "person".
  - repo = GitHub repository
  - technique = A method, pattern, or approach
  - tool = A product or service (not open source)
  - resource = An article, tutorial, or reference
  - person = A creator or expert to follow
- tags: Array of 3-5 relevant tags (lowercase, hyphenated)
- tools: Array of named tools or products mentioned (may be empty)
- techniques: Array of named methods or patterns described (may be empty)

Return ONLY valid JSON, no markdown or explanation."""

_PROPOSE_PROMPT = """\
Extract names of software tools, libraries, CLI tools, or projects mentioned in this transcript \
that could potentially be open source GitHub repositories.

Rules:
- Include specific tool/project names (e.g., "repeater", "sharp", "ffmpeg")
- Include names that sound like project names even with slight misspellings
- Do NOT include well-known commercial services (e.g., "ChatGPT", "Figma", "Notion", "AWS", \
"Discord", "Telegram", "WhatsApp")
- Do NOT include generic terms (e.g., "terminal", "algorithm", "app", "bot")
- Return ONLY a JSON array of names. If none found, return [].

Transcript:
{text}"""

_VERIFY_PROMPT = """\
Determine if this GitHub repository is the one being discussed in the transcript.

Transcript excerpt (discussing "{candidate}"):
{text}

GitHub Repository:
- Name: {full_name}
- Description: {description}
- Topics: {topics}
- Stars: {stars}

Question: Is this GitHub repository "{full_name}" the actual project/tool being discussed \
in the transcript as "{candidate}"?

Consider:
- Does the repo description match what the transcript describes?
- Is the repo name similar to what's mentioned (account for transcription errors)?
- Does the functionality align?

Respond with ONLY "yes" or "no"."""


def build_classification_context(
    source_kind: SourceKind,
    text: str | None = None,
    repo_metadata: RepoMetadata | None = None,
    author: str | None = None,
) -> str:
    """Assemble the size-bounded context block for classification.

    Source kind first, then author, repository metadata, and the body text
    truncated to CLASSIFY_TEXT_BUDGET characters.
    """
    parts = [f"Source type: {source_kind.value}"]
    if author:
        parts.append(f"Author: {author}")
    if repo_metadata:
        parts.append(
            f"GitHub repo: {repo_metadata.owner}/{repo_metadata.name}\n"
            f"Description: {repo_metadata.description or 'None'}\n"
            f"Language: {repo_metadata.language or 'Unknown'}\n"
            f"Topics: {', '.join(repo_metadata.topics) or 'None'}"
        )
    if text:
        label = "Transcript" if source_kind == SourceKind.SHORT_VIDEO else "Content"
        parts.append(f"{label}:\n{text[:CLASSIFY_TEXT_BUDGET]}")
    return "\n\n".join(parts)


def build_classification_prompt(context: str) -> str:
    return _CLASSIFY_PROMPT.format(context=context)


def build_propose_prompt(text: str) -> str:
    return _PROPOSE_PROMPT.format(text=text[:PROPOSE_TEXT_BUDGET])


def build_verify_prompt(text: str, candidate: str, repo: RepoInfo) -> str:
    return _VERIFY_PROMPT.format(
        candidate=candidate,
        text=text[:VERIFY_TEXT_BUDGET],
        full_name=repo.full_name,
        description=repo.description or "No description",
        topics=", ".join(repo.topics) or "None",
        stars=repo.stars,
    )
