"""Tests for recursive embed expansion: depth limits, cycles, sections and files."""

import pytest

from obsidian_typst.embeds import EmbedResolver, Environment, ResolvedLink
from obsidian_typst.models import ConversionOptions
from obsidian_typst.syntax.nodes import Embed
from obsidian_typst.syntax.references import parse_embed_reference


def _chain(length: int) -> dict[str, str]:
    """Chain1 embeds Chain2 ... up to Chain<length>, each with its own body."""
    files = {}
    for n in range(1, length + 1):
        body = f"Body {n}"
        if n < length:
            body += f"\n\n![[Chain{n + 1}]]"
        files[f"Chain{n}.md"] = body
    return files


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------


class TestEnvironment:
    def test_descend_records_ancestry(self, make_environment):
        env = make_environment({}, current_path="A.md")
        child = env.descend("B.md")
        assert child.current_path == "B.md"
        assert child.ancestry == frozenset({"A.md"})
        assert child.on_path("A.md")
        assert child.on_path("B.md")
        assert not child.on_path("C.md")

    def test_sections_are_distinct_keys(self, make_environment):
        env = make_environment({}, current_path="A.md")
        assert not env.on_path("A.md", "Details")
        assert env.descend("A.md", "Details").on_path("A.md")

    def test_detached_root_adds_no_ancestor(self):
        env = Environment.detached()
        assert env.descend("A.md").ancestry == frozenset()

    def test_with_path_resets_section(self, make_environment):
        env = make_environment({}).descend("A.md", "Sec").with_path("B.md")
        assert env.key == "B.md"


# ---------------------------------------------------------------------------
# Markdown embeds
# ---------------------------------------------------------------------------


class TestMarkdownEmbeds:
    @pytest.mark.asyncio
    async def test_embedded_note_is_quoted(self, convert):
        files = {"docs/embed.md": "# Embedded Title\n\nEmbedded body."}
        result = await convert("![[docs/embed]]", files)
        assert result == (
            '#quote(block: true)[\n#smallcaps("docs/embed.md")\n\n'
            "= Embedded Title\n\nEmbedded body.\n]\n"
        )

    @pytest.mark.asyncio
    async def test_missing_note(self, convert):
        result = await convert("![[Nope]]", {})
        assert "Missing embed" in result
        assert '#raw("Nope")' in result

    @pytest.mark.asyncio
    async def test_chain_within_depth(self, convert):
        result = await convert("![[Chain1]]", _chain(5), max_embed_depth=5)
        for n in range(1, 6):
            assert f"Body {n}" in result
        assert "Embed depth limit reached" not in result

    @pytest.mark.asyncio
    async def test_chain_beyond_depth(self, convert):
        result = await convert("![[Chain1]]", _chain(6), max_embed_depth=5)
        assert "Body 5" in result
        assert "Body 6" not in result
        assert "Embed depth limit reached" in result
        assert '#raw("Chain6")' in result

    @pytest.mark.asyncio
    async def test_zero_depth_blocks_notes_but_not_files(self, convert):
        files = {"Other.md": "text", "pic.png": None}
        result = await convert("![[Other]]\n\n![[pic.png]]", files, max_embed_depth=0)
        assert "Embed depth limit reached" in result
        assert '#image("pic.png")' in result

    @pytest.mark.asyncio
    async def test_mutual_cycle_detected(self, convert):
        files = {"A.md": "A text\n\n![[B]]", "B.md": "B text\n\n![[A]]"}
        result = await convert("![[A]]", files)
        assert "A text" in result
        assert "B text" in result
        assert "Embed cycle detected" in result

    @pytest.mark.asyncio
    async def test_cycle_bounded_by_depth_without_detection(self, convert):
        files = {"A.md": "A text\n\n![[B]]", "B.md": "B text\n\n![[A]]"}
        result = await convert("![[A]]", files, max_embed_depth=3, detect_embed_cycles=False)
        assert "Embed cycle detected" not in result
        assert "Embed depth limit reached" in result
        assert result.count("A text") == 2
        assert result.count("B text") == 1

    @pytest.mark.asyncio
    async def test_self_embed_is_cycle(self, convert):
        result = await convert("Intro\n\n![[Home]]", {"Home.md": "Intro\n\n![[Home]]"})
        assert "Embed cycle detected" in result

    @pytest.mark.asyncio
    async def test_same_note_twice_is_not_a_cycle(self, convert):
        result = await convert("![[Shared]]\n\n![[Shared]]", {"Shared.md": "shared"})
        assert result.count("shared") == 2
        assert "Embed cycle detected" not in result


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------

SECTIONED = "# Intro\n\nintro text\n\n## Details\n\ndetail text\n\n## Other\n\nother text ^blk1\n"


class TestSectionEmbeds:
    @pytest.mark.asyncio
    async def test_heading_section(self, convert):
        result = await convert("![[Doc#Details]]", {"Doc.md": SECTIONED})
        assert "detail text" in result
        assert "intro text" not in result
        assert "other text" not in result

    @pytest.mark.asyncio
    async def test_block_section(self, convert):
        result = await convert("![[Doc#^blk1]]", {"Doc.md": SECTIONED})
        assert "other text" in result
        assert "detail text" not in result

    @pytest.mark.asyncio
    async def test_missing_section(self, convert):
        result = await convert("![[Doc#Nowhere]]", {"Doc.md": SECTIONED})
        assert "Missing embed" in result

    @pytest.mark.asyncio
    async def test_section_of_current_note(self, transformer, make_environment):
        env = make_environment({"Home.md": SECTIONED}, current_path="Home.md")
        result = await transformer.transform("![[#Details]]", ConversionOptions(), env)
        assert "detail text" in result
        assert "Embed cycle detected" not in result


# ---------------------------------------------------------------------------
# Non-markdown files
# ---------------------------------------------------------------------------


class TestFileEmbeds:
    @pytest.mark.asyncio
    async def test_pdf_with_attributes(self, convert):
        result = await convert("![[assets/chart1.pdf|page=2,width=120pt]]", {"assets/chart1.pdf": None})
        assert result == '#image("assets/chart1.pdf", width: 120pt, page: 2)\n'

    @pytest.mark.asyncio
    async def test_other_file_becomes_link(self, convert):
        result = await convert("![[data.csv]]", {"data.csv": None})
        assert result == '#link("data.csv")[data.csv]\n'

    @pytest.mark.asyncio
    async def test_inline_image_embed(self, convert):
        result = await convert("See ![[pic.png]] here", {"pic.png": None})
        assert result == 'See #image("pic.png") here\n'


# ---------------------------------------------------------------------------
# Resolver behaviour
# ---------------------------------------------------------------------------


class TestEmbedResolver:
    @pytest.mark.asyncio
    async def test_siblings_expand_in_document_order(self, transformer):
        files = {"A.md": "a\n\n![[C]]", "B.md": "b", "C.md": "c"}
        reads = []

        async def read(path):
            reads.append(path)
            return files[path]

        async def resolve(target, source):
            path = f"{target}.md"
            return ResolvedLink(path, "md", True) if path in files else None

        env = Environment(read=read, resolve_link=resolve, current_path="Home.md")
        await transformer.transform("![[A]]\n\n![[B]]", ConversionOptions(), env)
        assert reads == ["A.md", "C.md", "B.md"]

    @pytest.mark.asyncio
    async def test_resolve_failure_is_missing(self):
        async def resolve(target, source):
            raise OSError("disk gone")

        async def render(content, env, depth, section):
            raise AssertionError("should not render")

        env = Environment(read=None, resolve_link=resolve, current_path="Home.md")
        embed = Embed(parse_embed_reference("Doc"))
        result = await EmbedResolver(render).expand(embed, env, 5)
        assert "Missing embed" in result

    @pytest.mark.asyncio
    async def test_read_failure_is_missing(self):
        async def resolve(target, source):
            return ResolvedLink("Doc.md", "md", True)

        async def read(path):
            raise FileNotFoundError(path)

        async def render(content, env, depth, section):
            raise AssertionError("should not render")

        env = Environment(read=read, resolve_link=resolve, current_path="Home.md")
        result = await EmbedResolver(render).expand(Embed(parse_embed_reference("Doc")), env, 5)
        assert "Missing embed" in result

    @pytest.mark.asyncio
    async def test_render_receives_descended_environment(self):
        seen = {}

        async def resolve(target, source):
            return ResolvedLink("Doc.md", "md", True)

        async def read(path):
            return "content"

        async def render(content, env, depth, section):
            seen.update(content=content, path=env.current_path, depth=depth, section=section)
            return "rendered"

        env = Environment(read=read, resolve_link=resolve, current_path="Home.md")
        result = await EmbedResolver(render).expand(Embed(parse_embed_reference("Doc#Part")), env, 3)
        assert seen == {"content": "content", "path": "Doc.md", "depth": 2, "section": "Part"}
        assert result == '#quote(block: true)[\n#smallcaps("Doc.md")\n\nrendered\n]'
