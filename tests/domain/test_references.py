"""Tests for link and agent mention extraction."""

import pytest

from agentdocs.domain.references import extract_agent_mentions, extract_links, is_external

LINKS_DOC = """\
See [the guide](guide.md#setup) and `[not a link](code.md)`.
External [site](https://example.com) is skipped.

```
[fenced](fenced.md)
```

![diagram](images/flow.png)
[titled](other.md "Other document")
"""


class TestExtractLinks:
    """Tests for extract_links()."""

    def test_local_links_only(self) -> None:
        links = extract_links(LINKS_DOC)

        assert [link.target for link in links] == [
            "guide.md#setup",
            "images/flow.png",
            "other.md",
        ]

    def test_line_numbers_are_one_based(self) -> None:
        links = extract_links(LINKS_DOC)

        assert [link.line for link in links] == [1, 8, 9]

    def test_path_and_anchor(self) -> None:
        link = extract_links(LINKS_DOC)[0]

        assert link.text == "the guide"
        assert link.path == "guide.md"
        assert link.anchor == "setup"

    def test_same_document_anchor(self) -> None:
        link = extract_links("[up](#overview)")[0]

        assert link.path == ""
        assert link.anchor == "overview"


class TestIsExternal:
    @pytest.mark.parametrize(
        ("target", "expected"),
        [
            ("https://example.com", True),
            ("mailto:team@example.com", True),
            ("//cdn.example.com/x.js", True),
            ("docs/a.md", False),
            ("#anchor", False),
        ],
    )
    def test_is_external(self, target: str, expected: bool) -> None:
        assert is_external(target) is expected


class TestAgentMentions:
    def test_bold_and_backticked_mentions(self) -> None:
        mentions = extract_agent_mentions("Ask the **Research Agent** or `testing_agent`.")

        assert [(m.name, m.agent_id, m.line) for m in mentions] == [
            ("Research Agent", "research_agent", 1),
            ("testing_agent", "testing_agent", 1),
        ]

    def test_ignores_non_agent_bold_text(self) -> None:
        assert extract_agent_mentions("**Important** and **not an agent**") == []

    def test_ignores_fenced_code(self) -> None:
        assert extract_agent_mentions("```\n**Ghost Agent**\n```\n") == []
