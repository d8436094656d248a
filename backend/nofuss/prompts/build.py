"""
Build Assistant Prompts

Initial conversation for the build environment, seeded from the
stored specification when there is one.
"""
from typing import List, Optional

from ..schemas.idea import IdeaSpecification

BUILD_SYSTEM_GENERIC = """You are a build assistant that helps users build web applications.
You have access to a code editor and preview environment. You can create, modify, and delete files.

Your task is to help the user build a website. Start by asking them what kind of website they want to build."""

BUILD_GREETING_GENERIC = """Hi there! I'm here to help you build a website. What kind of website would you like to create today? For example:

1. A personal portfolio
2. A business landing page
3. A blog
4. An e-commerce store
5. Something else entirely

Let me know what you have in mind, and we can get started right away!"""

BUILD_SYSTEM_WITH_SPEC = """You are a build assistant that helps users build web applications.
You have access to a code editor and preview environment. You can create, modify, and delete files.

The user wants to build a website with the following specifications:

Purpose: {purpose}

Target Audience: {target_audience}

Key Features:
{key_features}

Design Preferences:
- Color Scheme: {color_scheme}
- Style: {style}
- Layout: {layout}

Content Sections:
{content_sections}

Your task is to help the user build this website. Start by suggesting a project structure and initial files."""

BUILD_GREETING_WITH_SPEC = """I'll help you build a website based on your requirements. Let's start by creating a project structure that will work well for your needs.

Based on your specifications, I recommend a simple but effective structure using HTML, CSS, and JavaScript. Let's begin by creating the following files:

1. index.html - Main entry point for your website
2. styles.css - For styling your website according to your design preferences
3. script.js - For any interactive elements

Would you like me to create these files now with some initial content based on your requirements?"""


def _bullets(items: List[str]) -> str:
    return "\n".join(f"- {item}" for item in items)


def build_initial_messages(spec: Optional[IdeaSpecification]) -> List[dict]:
    """System instruction and greeting that open the build conversation."""
    if spec is None:
        return [
            {"role": "system", "content": BUILD_SYSTEM_GENERIC},
            {"role": "assistant", "content": BUILD_GREETING_GENERIC},
        ]

    system = BUILD_SYSTEM_WITH_SPEC.format(
        purpose=spec.purpose,
        target_audience=spec.target_audience,
        key_features=_bullets(spec.key_features),
        color_scheme=spec.design_preferences.color_scheme,
        style=spec.design_preferences.style,
        layout=spec.design_preferences.layout,
        content_sections=_bullets(spec.content_sections),
    )
    return [
        {"role": "system", "content": system},
        {"role": "assistant", "content": BUILD_GREETING_WITH_SPEC},
    ]
