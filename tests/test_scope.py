from ptags.modules.core.scope import ScopeKind, ScopeStack


def test_label_joins_names_under_innermost_kind() -> None:
    scopes = ScopeStack()
    assert scopes.current_label() is None

    scopes.push(ScopeKind.NAMESPACE, "App", "namespace App;")
    scopes.push(ScopeKind.CLASS, "User", "class User")
    assert scopes.current_label() == "class:App::User"

    scopes.pop()
    assert scopes.current_label() == "namespace:App"


def test_scoped_pattern_skips_frames_without_pattern() -> None:
    scopes = ScopeStack()
    scopes.push(ScopeKind.NAMESPACE, "Vendor")
    scopes.push(ScopeKind.NAMESPACE, "Pkg", "namespace Vendor\\Pkg;")
    scopes.push(ScopeKind.INTERFACE, "Api", "interface Api")

    assert scopes.scoped_pattern("function run(") == (
        "namespace Vendor\\Pkg;/;/interface Api/;/function run("
    )


def test_reset_empties_stack() -> None:
    scopes = ScopeStack()
    scopes.push(ScopeKind.CLASS, "A")
    scopes.reset()
    assert not scopes
    assert len(scopes) == 0
    assert scopes.scoped_pattern("const X") == "const X"
