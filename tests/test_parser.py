from ptags.modules.core.lexer import Token, TokenKind
from ptags.modules.core.parser import DeclarationParser, parse_tokens
from ptags.modules.core.scope import ScopeKind, ScopeStack
from ptags.modules.core.tags import TagKind

PATH = "/proj/src/User.php"


def _cmd(pattern: str) -> str:
    return f'let _s=@/ | /{pattern}/; | let @/=_s";"'


def _by_name(tags):
    return {tag.name: tag for tag in tags}


def test_namespace_class_method_nesting(php_tokens) -> None:
    source = (
        "<?php\n"
        "namespace App;\n"
        "\n"
        "class User extends Model\n"
        "{\n"
        "    public function getName($a, $b = array(1, 2))\n"
        "    {\n"
        "        return $this->name;\n"
        "    }\n"
        "}\n"
    )
    tags = parse_tokens(php_tokens(source), PATH)
    assert [t.name for t in tags] == ["App", "User", "getName"]

    ns, cls, method = tags
    assert ns.kind is TagKind.NAMESPACE
    assert ns.line == 2
    assert ns.scope is None
    assert ns.pattern == _cmd("namespace App;")

    assert cls.kind is TagKind.CLASS
    assert cls.line == 4
    assert cls.scope == "namespace:App"
    assert cls.pattern == _cmd("namespace App;/;/class User")

    assert method.kind is TagKind.FUNCTION
    assert method.line == 6
    assert method.scope == "class:App::User"
    assert method.pattern == _cmd("namespace App;/;/class User/;/function getName(")
    assert method.extras == ("signature:($a, $b = array(1, 2))",)
    assert method.access == "public"


def test_properties_get_one_pattern_each(php_tokens) -> None:
    source = (
        "class A {\n"
        "    private $x = 1, $y;\n"
        "    var $z;\n"
        "}\n"
    )
    tags = _by_name(parse_tokens(php_tokens(source), PATH))

    assert tags["$x"].kind is TagKind.PROPERTY
    assert tags["$x"].access == "private"
    assert tags["$x"].pattern == _cmd("class A/;/private \\$x")
    assert tags["$y"].access == "private"
    assert tags["$y"].pattern == _cmd("class A/;/\\$y")
    assert tags["$z"].access == "public"
    assert tags["$z"].pattern == _cmd("class A/;/var \\$z")
    assert tags["$z"].line == 3


def test_interface_members(php_tokens) -> None:
    source = (
        "interface Shape\n"
        "{\n"
        "    const SIDES = 0;\n"
        "    protected function area();\n"
        "    function name();\n"
        "}\n"
    )
    tags = _by_name(parse_tokens(php_tokens(source), PATH))

    assert tags["Shape"].kind is TagKind.INTERFACE
    assert tags["SIDES"].kind is TagKind.CONSTANT
    assert tags["SIDES"].scope == "interface:Shape"
    assert tags["SIDES"].access is None
    assert tags["area"].access == "protected"
    assert tags["area"].extras == ("signature:()",)
    assert tags["name"].access == "public"
    assert tags["name"].scope == "interface:Shape"


def test_visibility_const_is_tagged_as_constant(php_tokens) -> None:
    source = "class K {\n    public const X = 1;\n    function f() {}\n}\n"
    tags = _by_name(parse_tokens(php_tokens(source), PATH))

    assert tags["X"].kind is TagKind.CONSTANT
    assert tags["X"].scope == "class:K"
    assert tags["f"].scope == "class:K"


def test_unterminated_function_emits_nothing(php_tokens) -> None:
    assert parse_tokens(php_tokens("<?php\nfunction foo"), PATH) == []
    assert parse_tokens(php_tokens("<?php\nfunction foo($a"), PATH) == []


def test_abstract_function_without_body(php_tokens) -> None:
    tags = parse_tokens(php_tokens("<?php\nfunction foo($a);\n"), PATH)
    assert [t.name for t in tags] == ["foo"]
    assert tags[0].scope is None
    assert tags[0].access is None


def test_return_type_does_not_rename_function(php_tokens) -> None:
    source = "<?php\nfunction make(): Widget {\n    return new Widget();\n}\n"
    tags = parse_tokens(php_tokens(source), PATH)
    assert [t.name for t in tags] == ["make"]


def test_closures_and_anonymous_classes_are_skipped(php_tokens) -> None:
    source = (
        "<?php\n"
        "$f = function ($a) use ($b) { return $a; };\n"
        "$x = new class {\n"
        "    public function hidden() {}\n"
        "};\n"
        "function real() {}\n"
    )
    tags = parse_tokens(php_tokens(source), PATH)
    assert [t.name for t in tags] == ["real"]
    assert tags[0].line == 6


def test_braced_namespace_with_dotted_name(php_tokens) -> None:
    source = (
        "<?php\n"
        "namespace A\\B {\n"
        "    if (true) {\n"
        "        function cond() {}\n"
        "    }\n"
        "    class C {}\n"
        "}\n"
        "function after() {}\n"
    )
    tags = _by_name(parse_tokens(php_tokens(source), PATH))

    assert set(tags) == {"B", "cond", "C", "after"}
    assert tags["B"].scope == "namespace:A"
    assert tags["B"].pattern == _cmd("namespace A\\\\B {")
    assert tags["cond"].scope == "namespace:A::B"
    assert tags["cond"].pattern == _cmd("namespace A\\\\B {/;/function cond(")
    assert tags["C"].scope == "namespace:A::B"
    assert tags["after"].scope is None


def test_new_namespace_resets_scope(php_tokens) -> None:
    source = "namespace A;\nclass X {}\nnamespace B;\nclass Y {}\n"
    tags = _by_name(parse_tokens(php_tokens(source), PATH))

    assert tags["X"].scope == "namespace:A"
    assert tags["Y"].scope == "namespace:B"
    assert tags["Y"].pattern == _cmd("namespace B;/;/class Y")


def test_pattern_stops_at_first_newline(php_tokens) -> None:
    tags = parse_tokens(php_tokens("function\nfoo() {}\n"), PATH)
    assert [t.name for t in tags] == ["foo"]
    assert tags[0].pattern == _cmd("function;")


def test_curly_open_keeps_block_skip_balanced() -> None:
    S = TokenKind.SYMBOL
    tokens = [
        Token(TokenKind.CLASS, "class", 1),
        Token(TokenKind.WHITESPACE, " ", 1),
        Token(TokenKind.NAME, "A", 1),
        Token(TokenKind.WHITESPACE, " ", 1),
        Token(S, "{", 1),
        Token(TokenKind.FUNCTION, "function", 1),
        Token(TokenKind.WHITESPACE, " ", 1),
        Token(TokenKind.NAME, "f", 1),
        Token(S, "(", 1),
        Token(S, ")", 1),
        Token(S, "{", 1),
        Token(TokenKind.LITERAL, '"', 1),
        Token(TokenKind.CURLY_OPEN, "{", 1),
        Token(TokenKind.VARIABLE, "$x", 1),
        Token(S, "}", 1),
        Token(TokenKind.LITERAL, '"', 1),
        Token(S, "}", 1),
        Token(TokenKind.FUNCTION, "function", 2),
        Token(TokenKind.WHITESPACE, " ", 2),
        Token(TokenKind.NAME, "g", 2),
        Token(S, "(", 2),
        Token(S, ")", 2),
        Token(S, ";", 2),
        Token(S, "}", 2),
        Token(TokenKind.FUNCTION, "function", 3),
        Token(TokenKind.WHITESPACE, " ", 3),
        Token(TokenKind.NAME, "top", 3),
        Token(S, ";", 3),
    ]
    tags = _by_name(parse_tokens(tokens, PATH))

    assert tags["f"].scope == "class:A"
    assert tags["g"].scope == "class:A"
    assert tags["top"].scope is None


def test_on_tag_sees_every_tag_in_order(php_tokens) -> None:
    seen = []
    scopes = ScopeStack()
    scopes.push(ScopeKind.NAMESPACE, "Stale")
    parser = DeclarationParser(
        php_tokens("namespace N;\nconst ONE = 1;\nfunction two() {}\n"),
        PATH,
        scopes=scopes,
        on_tag=seen.append,
    )
    tags = parser.parse()

    assert seen == tags
    assert [t.name for t in tags] == ["N", "ONE", "two"]
    assert tags[0].scope is None
    assert tags[1].scope == "namespace:N"
