"""Unit tests for the content generator (skaya.generator).

Tests cover:
- strip_code_fences
- Template mode (substitution, import injection, inputs left untouched)
- AI mode ordering: primary first, its result passed to dependent files
- All-or-nothing fallback on provider errors, blank output, unexpected exceptions
  and cancelled requests; cancelling the whole run still propagates
- Sequential mode stopping at the first failure
"""

from __future__ import annotations

import asyncio
import re

import pytest

from skaya.exceptions import MissingAPIKey, TemplateFileMissing
from skaya.generator import ContentGenerator, strip_code_fences
from skaya.models import ComponentImport, ComponentSource, ComponentType, ProjectType, TemplateFileInfo
from skaya.resolver import TemplateResolver


@pytest.fixture
def button_files(settings):
    return TemplateResolver(settings.component_templates_dir).resolve(
        ProjectType.FRONTEND, ComponentType.COMPONENT, "button"
    )


async def _generate(generator, files, **kwargs):
    return await generator.generate(
        ProjectType.FRONTEND, ComponentType.COMPONENT, "button", files, **kwargs
    )


# ---------------------------------------------------------------------------
# strip_code_fences
# ---------------------------------------------------------------------------


class TestStripCodeFences:
    @pytest.mark.unit
    def test_fenced_with_language(self):
        assert strip_code_fences("```tsx\nconst a = 1;\n```") == "const a = 1;"

    @pytest.mark.unit
    def test_plain_text_unchanged(self):
        assert strip_code_fences("const a = 1;\n") == "const a = 1;\n"

    @pytest.mark.unit
    def test_inner_fences_kept(self):
        text = "```md\nuse ```js``` blocks\nend\n```\n"
        assert strip_code_fences(text) == "use ```js``` blocks\nend"


# ---------------------------------------------------------------------------
# Template mode
# ---------------------------------------------------------------------------


class TestTemplateMode:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_substitutes_every_file(self, button_files):
        result = await _generate(ContentGenerator(), button_files)

        assert result.source is ComponentSource.TEMPLATE
        assert result.fell_back is False
        body = result.files[0].content
        assert "export const Button: React.FC<ButtonProps>" in body
        assert "import './Button.css';" in body
        assert not re.search(r"\{\{[A-Za-z]+\}\}", "".join(f.content for f in result.files))
        assert [f.target_file_name for f in result.files] == [f.target_file_name for f in button_files]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_inputs_not_modified(self, button_files):
        before = [f.content for f in button_files]
        await _generate(ContentGenerator(), button_files)
        assert [f.content for f in button_files] == before

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_imports_go_into_primary_only(self, button_files):
        deps = [ComponentImport(name="Icon", component_type=ComponentType.COMPONENT)]
        result = await _generate(ContentGenerator(), button_files, dependencies=deps)
        line = 'import Icon from "@/components/Icon/Icon";'
        assert result.files[0].content.startswith(line)
        assert all(line not in f.content for f in result.files[1:])

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_content_raises(self):
        files = [TemplateFileInfo(original_file_name="component.tsx", target_file_name="Button.tsx")]
        with pytest.raises(TemplateFileMissing):
            await _generate(ContentGenerator(), files)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_ai_without_provider(self, button_files):
        with pytest.raises(MissingAPIKey):
            await _generate(ContentGenerator(), button_files, ai=True)


# ---------------------------------------------------------------------------
# AI mode
# ---------------------------------------------------------------------------


class TestAIMode:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_primary_generated_first_and_shared(self, button_files, make_provider):
        provider = make_provider({"Button.tsx": "export const Button = () => null;\n"})
        result = await _generate(
            ContentGenerator(provider=provider), button_files, ai=True, description="a button"
        )

        assert result.source is ComponentSource.AI
        assert provider.targets[0] == "Button.tsx"
        assert sorted(provider.targets[1:]) == ["Button.css", "Button.stories.tsx", "Button.test.tsx"]
        for call in provider.calls[1:]:
            assert "export const Button = () => null;" in call["user"]
        assert "Description: a button" in provider.calls[0]["user"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_output_order_and_trailing_newline(self, button_files, make_provider):
        provider = make_provider({"Button.css": ".button {}"})
        result = await _generate(ContentGenerator(provider=provider), button_files, ai=True)
        assert [f.target_file_name for f in result.files] == [
            "Button.tsx",
            "Button.stories.tsx",
            "Button.test.tsx",
            "Button.css",
        ]
        assert result.files[3].content == ".button {}\n"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_ai_output_is_substituted(self, button_files, make_provider):
        provider = make_provider({"Button.tsx": "```tsx\nexport const Component = () => null;\n```"})
        result = await _generate(ContentGenerator(provider=provider), button_files, ai=True)
        assert result.files[0].content == "export const Button = () => null;\n"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_dependency_sources_only_in_primary_prompt(self, button_files, make_provider):
        provider = make_provider()
        deps = [
            ComponentImport(name="Icon", data="export const Icon = 'SOURCE';", component_type=ComponentType.COMPONENT)
        ]
        result = await _generate(
            ContentGenerator(provider=provider), button_files, ai=True, dependencies=deps
        )
        assert "export const Icon = 'SOURCE';" in provider.calls[0]["user"]
        assert 'import Icon from "@/components/Icon/Icon";' in provider.calls[0]["user"]
        for call in provider.calls[1:]:
            assert "Source of dependency" not in call["user"]
        assert result.files[0].content.startswith('import Icon from "@/components/Icon/Icon";')


class TestFallback:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_any_failure_falls_back_entirely(self, button_files, make_provider):
        provider = make_provider(fail_on={"Button.css"})
        result = await _generate(ContentGenerator(provider=provider), button_files, ai=True)
        templated = await _generate(ContentGenerator(), button_files)

        assert result.fell_back is True
        assert result.source is ComponentSource.TEMPLATE
        assert "provider unavailable" in result.reason
        assert [f.content for f in result.files] == [f.content for f in templated.files]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_primary_failure_skips_dependents(self, button_files, make_provider):
        provider = make_provider(fail_on={"Button.tsx"})
        result = await _generate(ContentGenerator(provider=provider), button_files, ai=True)
        assert result.fell_back is True
        assert provider.targets == ["Button.tsx"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_blank_output_falls_back(self, button_files, make_provider):
        provider = make_provider({"Button.test.tsx": "  \n"})
        result = await _generate(ContentGenerator(provider=provider), button_files, ai=True)
        assert result.fell_back is True
        assert "Empty response" in result.reason

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unexpected_exception_falls_back(self, button_files, make_provider):
        provider = make_provider(fail_on={"Button.stories.tsx"}, error=RuntimeError("boom"))
        result = await _generate(ContentGenerator(provider=provider), button_files, ai=True)
        assert result.fell_back is True
        assert "RuntimeError: boom" in result.reason

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_sequential_stops_at_first_failure(self, button_files, make_provider):
        provider = make_provider(fail_on={"Button.stories.tsx"})
        result = await _generate(
            ContentGenerator(provider=provider, parallel=False), button_files, ai=True
        )
        assert result.fell_back is True
        assert provider.targets == ["Button.tsx", "Button.stories.tsx"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize("parallel", [True, False])
    async def test_cancelled_request_falls_back(self, button_files, make_provider, parallel):
        provider = make_provider(fail_on={"Button.css"}, error=asyncio.CancelledError())
        result = await _generate(
            ContentGenerator(provider=provider, parallel=parallel), button_files, ai=True
        )
        templated = await _generate(ContentGenerator(), button_files)

        assert result.fell_back is True
        assert "cancelled" in result.reason
        assert [f.content for f in result.files] == [f.content for f in templated.files]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_cancelling_the_run_propagates(self, button_files):
        class HangingProvider:
            name = "hanging"

            def __init__(self):
                self.started = asyncio.Event()

            async def complete(self, system, user):
                self.started.set()
                await asyncio.sleep(3600)

        provider = HangingProvider()
        task = asyncio.create_task(_generate(ContentGenerator(provider=provider), button_files, ai=True))
        await provider.started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
