"""Response policies for questions about web-sourced documents.

POLICIES is evaluated top to bottom and the first policy whose keywords
occur in the lowercased question wins. DEFAULT_WEB_POLICY applies when no
keyword matches.
"""

from pydantic import BaseModel, ConfigDict


class PromptPolicy(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    keywords: tuple[str, ...] = ()
    instructions: str

    def matches(self, lower_query: str) -> bool:
        return any(keyword in lower_query for keyword in self.keywords)


LYRICS_POLICY = PromptPolicy(
    name="lyrics",
    keywords=("lyrics", "song"),
    instructions="""COPYRIGHT PROTECTION ACTIVE:

The user is asking about song lyrics. Song lyrics are copyrighted content.

YOU MUST:
1. Provide SHORT excerpts ONLY (2-3 lines maximum)
2. If the user asks for full or complete lyrics, explain that you cannot reproduce complete copyrighted lyrics
3. Describe the song's themes, mood and message instead
4. Cite the source (video description or audio transcription) where the full lyrics can be found

Include song information (artist, title, source) when it is available.
DO NOT reproduce the entire song text, even if it is in the documents.""",
)

INSTALL_CODE_POLICY = PromptPolicy(
    name="install_code",
    keywords=("install", "how to", "code", "example", "command"),
    instructions="""CODE/INSTALLATION QUERY:

WEB CONTENT EXTRACTION RULES:
1. IGNORE: HTML tags, CSS classes (text-4xl, flex, etc.), navigation elements
2. EXTRACT: Installation commands, code examples, step-by-step instructions

COMMON PATTERNS:
- "npm install package-name" -> Quote exactly
- "pip install package-name" -> Quote exactly
- Code blocks -> Preserve formatting
- Step-by-step instructions -> Extract numbered/bulleted steps

If you see installation commands buried in HTML noise, extract them cleanly and quote them verbatim.""",
)

PAGE_CONTENT_POLICY = PromptPolicy(
    name="page_content",
    keywords=(
        "what is written",
        "what is at the top",
        "what does the website say",
        "what does the page say",
        "content of",
        "text on the page",
    ),
    instructions="""WEBSITE CONTENT EXTRACTION:

YOU ARE READING WEB CONTENT. The text you need may be BURIED in markup noise.

NOISE TO COMPLETELY IGNORE:
- CSS classes: text-4xl, text-white, flex, pt-4, bg-blue-500, etc.
- Attributes and tag names: class="...", id="...", div, span, button
- Navigation/UI elements: Quick search, Ctrl K, menu items

WHAT TO EXTRACT:
- Headings and titles
- Main descriptive text
- Feature descriptions and marketing copy
- Instructions and guides

EXAMPLE:
Raw: "text-4xl text-gray-950 tracking-tighterRapidly build modern websites without ever leaving your HTML."
Extract: "Rapidly build modern websites without ever leaving your HTML."

STRATEGY:
1. Identify readable sentences and phrases
2. Ignore single words that look like CSS classes
3. Extract multi-word phrases that form coherent text
4. Present the clean, readable text""",
)

DOCUMENTATION_POLICY = PromptPolicy(
    name="documentation",
    keywords=("documentation", "tutorial", "guide", "how does", "explain"),
    instructions="""DOCUMENTATION/TUTORIAL CONTENT:

EXTRACTION PRIORITY:
1. Main concepts and explanations
2. Step-by-step instructions
3. Code examples (preserve formatting)
4. Important notes/warnings
5. Links to related topics

IGNORE navigation menus, search boxes, sidebars, footers, cookie notices and advertisement text.

PRESENT a clean, structured explanation with code blocks clearly formatted and steps in logical order.""",
)

API_PACKAGE_POLICY = PromptPolicy(
    name="api_package",
    keywords=("api", "package", "library", "module"),
    instructions="""API/PACKAGE DOCUMENTATION:

EXTRACT IN THIS ORDER:
1. Package name and version
2. Installation command
3. Basic usage example
4. Key features/methods
5. Configuration options

PRESERVE:
- Exact function/method names
- Parameter types
- Code examples with correct syntax
- Import statements

Make code examples readable and properly formatted.""",
)

ARTICLE_POLICY = PromptPolicy(
    name="article",
    keywords=("article", "blog", "post", "read"),
    instructions="""BLOG/ARTICLE CONTENT:

EXTRACT:
1. Article title/heading
2. Main content paragraphs
3. Subheadings
4. Key points
5. Conclusions

IGNORE author bio sections, related-article sidebars, comments, share buttons and advertisement blocks.

Present the article content in clean, readable format with proper paragraph breaks.""",
)

DEFAULT_WEB_POLICY = PromptPolicy(
    name="web_default",
    instructions="""GENERAL WEB CONTENT:

You are reading web content. Extract the ACTUAL READABLE TEXT.

IGNORE ALL:
- CSS classes and styling (text-xl, flex, bg-blue, etc.)
- HTML tags and attributes
- Navigation elements
- UI framework keywords appearing alone

EXTRACT:
- Sentences and phrases that form coherent text
- Headings and titles
- Descriptions and explanations
- Lists and bullet points (content, not markup)

Look for MEANING, not markup. The user wants the visible text content, not the page structure.""",
)

POLICIES: tuple[PromptPolicy, ...] = (
    LYRICS_POLICY,
    INSTALL_CODE_POLICY,
    PAGE_CONTENT_POLICY,
    DOCUMENTATION_POLICY,
    API_PACKAGE_POLICY,
    ARTICLE_POLICY,
)
