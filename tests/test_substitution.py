"""Unit tests for the name-substitution engine (skaya.substitution)."""

from __future__ import annotations

import pytest

from skaya.models import ComponentType
from skaya.substitution import component_name, name_variants, substitute, target_file_name


class TestComponentName:
    @pytest.mark.unit
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("button", "Button"),
            ("user-card", "UserCard"),
            ("user_card", "UserCard"),
            ("userCard", "UserCard"),
            ("  Nav Bar ", "NavBar"),
            ("ERC20", "ERC20"),
        ],
    )
    def test_normalization(self, raw, expected):
        assert component_name(raw) == expected

    @pytest.mark.unit
    @pytest.mark.parametrize("raw", ["", "   ", "1button", "my.button", "../etc"])
    def test_invalid_names(self, raw):
        with pytest.raises(ValueError):
            component_name(raw)

    @pytest.mark.unit
    def test_variants(self):
        assert name_variants("user-card") == {
            "lower": "userCard",
            "capitalized": "UserCard",
            "upper": "USERCARD",
        }


class TestTargetFileName:
    @pytest.mark.unit
    def test_replaces_type_token(self):
        assert target_file_name("component.stories.tsx", ComponentType.COMPONENT, "button") == "Button.stories.tsx"
        assert target_file_name("page.css", ComponentType.PAGE, "home") == "Home.css"
        assert target_file_name("contract.sol", "contract", "token") == "Token.sol"

    @pytest.mark.unit
    def test_is_deterministic(self):
        first = target_file_name("route.test.ts", ComponentType.ROUTE, "users")
        assert first == target_file_name("route.test.ts", ComponentType.ROUTE, "users") == "Users.test.ts"


class TestSubstitute:
    @pytest.mark.unit
    def test_placeholders_in_three_casings(self):
        content = "{{component}} {{Component}} {{COMPONENT}}"
        assert substitute(content, ComponentType.COMPONENT, "user-card") == "userCard UserCard USERCARD"

    @pytest.mark.unit
    def test_storybook_pairing(self):
        content = "const meta = {\n  component: Component,\n};"
        result = substitute(content, ComponentType.COMPONENT, "button")
        assert "component: Button," in result

    @pytest.mark.unit
    def test_bare_keyword_replaced_case_insensitively(self):
        content = "import Component from './component';"
        assert substitute(content, ComponentType.COMPONENT, "button") == "import Button from './Button';"

    @pytest.mark.unit
    def test_namespace_qualified_identifiers_survive(self):
        content = "class X extends React.Component {}"
        assert substitute(content, ComponentType.COMPONENT, "button") == content

    @pytest.mark.unit
    def test_mongoose_model_survives(self):
        content = "export const {{Model}} = mongoose.model('{{Model}}', schema);"
        assert (
            substitute(content, ComponentType.MODEL, "user")
            == "export const User = mongoose.model('User', schema);"
        )

    @pytest.mark.unit
    def test_keyword_followed_by_colon_survives(self):
        content = "{ page: 1, route: '/x' }"
        assert substitute(content, ComponentType.PAGE, "home") == content
        assert substitute(content, ComponentType.ROUTE, "users") == content

    @pytest.mark.unit
    def test_word_boundaries(self):
        content = "const router = Router(); // routes"
        assert substitute(content, ComponentType.ROUTE, "users") == content

    @pytest.mark.unit
    def test_content_without_keyword_is_unchanged(self):
        content = "export const answer = 42;\n"
        for ctype in ComponentType:
            assert substitute(content, ctype, "thing") == content

    @pytest.mark.unit
    def test_solidity_keyword_is_not_rewritten(self):
        content = "pragma solidity ^0.8.20;\n\ncontract {{Contract}} {\n}\n"
        assert substitute(content, ComponentType.CONTRACT, "token") == (
            "pragma solidity ^0.8.20;\n\ncontract Token {\n}\n"
        )

    @pytest.mark.unit
    def test_substitution_is_stable_on_its_own_output(self):
        content = "import Component from './component';\nexport default Component;\n"
        once = substitute(content, ComponentType.COMPONENT, "card")
        assert substitute(once, ComponentType.COMPONENT, "card") == once
