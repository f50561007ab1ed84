import sys
import pytest

from inkgen import Conventions
from inkgen.errors import NameCollisionError, RecursionLimitExceededError
from inkgen.registry import parse_metadata
from inkgen.codegen import TypeResolver, DeclarationCollector
from inkgen.codegen.resolved import (
    Scalar, ByteList, BitList, ListOf, FixedList, Group, Nullable, Outcome, DeclarationRef, UNIT
)

from support_modules import contracts


def make_resolver(builder, collector=None, **kwargs):
    metadata = parse_metadata(builder.build())
    limit = kwargs.pop("collision_limit", 64)
    if collector is None:
        collector = DeclarationCollector(limit)
    return TypeResolver(metadata.registry, collector, **kwargs), collector


# Primitive and inline mapping

@pytest.mark.parametrize("kind, expected", [
    ("bool", Scalar("boolean")),
    ("str", Scalar("string")),
    ("char", Scalar("string")),
    ("u8", Scalar("number")),
    ("i32", Scalar("number")),
    ("u64", Scalar("bignumber")),
    ("u128", Scalar("bignumber")),
    ("i256", Scalar("bignumber")),
])
def test_primitive_mapping(builder, kind, expected):
    t = builder.primitive(kind)
    resolver, _ = make_resolver(builder)
    assert resolver.resolve(t) == expected


def test_inline_formers(builder):
    u8, u16, boolean = builder.primitive("u8"), builder.primitive("u16"), builder.primitive("bool")
    ids = dict(
        compact=builder.compact(builder.primitive("u128")),
        bytes=builder.sequence(u8),
        compact_bytes=builder.sequence(builder.compact(u8)),
        fixed_bytes=builder.array(u8, 32),
        fixed=builder.array(u16, 3),
        numbers=builder.sequence(u16),
        unit=builder.unit(),
        pair=builder.tuple(u8, boolean),
        bits=builder.bit_sequence(),
    )
    resolver, collector = make_resolver(builder)

    assert resolver.resolve(ids["compact"]) == Scalar("bignumber")
    assert resolver.resolve(ids["bytes"]) == ByteList()
    assert resolver.resolve(ids["compact_bytes"]) == ByteList()
    assert resolver.resolve(ids["fixed_bytes"]) == ByteList(32)
    assert resolver.resolve(ids["fixed"]) == FixedList(Scalar("number"), 3)
    assert resolver.resolve(ids["numbers"]) == ListOf(Scalar("number"))
    assert resolver.resolve(ids["unit"]) == UNIT
    assert resolver.resolve(ids["pair"]) == Group([Scalar("number"), Scalar("boolean")])
    assert resolver.resolve(ids["bits"]) == BitList()
    assert collector.declarations == []


def test_address_and_hash_wrappers(builder):
    account, hash_ = builder.account_id(), builder.hash()
    resolver, collector = make_resolver(builder)
    assert resolver.resolve(account) == Scalar("string")
    assert resolver.resolve(hash_) == ByteList(32)
    assert collector.declarations == []


def test_address_detection_follows_conventions(builder):
    account = builder.account_id()
    resolver, collector = make_resolver(builder, conventions=Conventions(address_names=()))
    ref = resolver.resolve(account)
    assert isinstance(ref, DeclarationRef)
    assert ref.name == "AccountId"


# Mapping fidelity

def test_token_info_struct(builder):
    string = builder.primitive("str")
    info = builder.composite(
        [("name", string), ("symbol", string), ("decimals", builder.primitive("u8"))],
        path=["erc20", "TokenInfo"]
    )
    resolver, collector = make_resolver(builder)
    ref = resolver.resolve(info)

    assert isinstance(ref, DeclarationRef)
    assert len(collector.declarations) == 1
    decl = ref.declaration
    assert decl.name == "TokenInfo"
    assert decl.kind == "struct"
    assert [(f.name, f.expr) for f in decl.fields] == [
        ("name", Scalar("string")), ("symbol", Scalar("string")), ("decimals", Scalar("number"))
    ]


def test_option_of_u128_is_inline(builder):
    opt = builder.option(builder.primitive("u128"))
    resolver, collector = make_resolver(builder)
    assert resolver.resolve(opt) == Nullable(Scalar("bignumber"))
    assert collector.declarations == []


def test_result_with_error_enum(builder):
    error = builder.variant([("InsufficientBalance", ()), ("Paused", ())], path=["token", "Error"])
    res = builder.result(builder.unit(), error)
    resolver, collector = make_resolver(builder)

    expr = resolver.resolve(res)
    assert isinstance(expr, Outcome)
    assert expr.ok == UNIT
    assert isinstance(expr.err, DeclarationRef)
    assert expr.err.declaration.kind == "union"
    assert [d.name for d in collector.declarations] == ["Error_"]


def test_three_case_enum(builder):
    color = builder.variant(
        [("Red", ()), ("Green", ()), ("Blue", [builder.primitive("u8")])], path=["paint", "Color"]
    )
    resolver, collector = make_resolver(builder)
    decl = resolver.resolve(color).declaration

    assert decl.kind == "union"
    assert [(c.name, c.index, len(c.fields)) for c in decl.cases] == [("Red", 0, 0), ("Green", 1, 0), ("Blue", 2, 1)]
    assert decl.cases[2].fields[0].name == "value"
    assert decl.cases[2].fields[0].expr == Scalar("number")


def test_sequence_reuses_declaration(builder):
    point = builder.composite([("x", builder.primitive("i32")), ("y", builder.primitive("i32"))], path=["Point"])
    points = builder.sequence(point)
    resolver, collector = make_resolver(builder)

    first = resolver.resolve(point)
    listed = resolver.resolve(points)
    assert isinstance(listed, ListOf)
    assert listed.element.declaration is first.declaration
    assert len(collector.declarations) == 1


def test_discriminants_are_kept(builder):
    e = builder.variant([("A", (), 3), ("B", (), 7)], path=["E"])
    resolver, _ = make_resolver(builder)
    assert [c.index for c in resolver.resolve(e).declaration.cases] == [3, 7]


def test_positional_field_names(builder):
    u8 = builder.primitive("u8")
    single = builder.composite([u8], path=["Single"])
    double = builder.composite([u8, builder.primitive("bool")], path=["Double"])
    resolver, _ = make_resolver(builder)

    assert [f.name for f in resolver.resolve(single).declaration.fields] == ["value"]
    fields = resolver.resolve(double).declaration.fields
    assert [f.name for f in fields] == ["field0", "field1"]
    assert all(f.positional for f in fields)


# Conventions

def test_option_detection_can_be_disabled(builder):
    opt = builder.option(builder.primitive("u8"))
    resolver, collector = make_resolver(builder, conventions=Conventions(detect_option=False))
    ref = resolver.resolve(opt)
    assert isinstance(ref, DeclarationRef)
    assert ref.name == "Option"


def test_result_detection_can_be_disabled(builder):
    res = builder.result(builder.primitive("u8"), builder.primitive("str"))
    resolver, _ = make_resolver(builder, conventions=Conventions(detect_result=False))
    assert resolver.resolve(res).declaration.kind == "union"


def test_require_path(builder):
    maybe = builder.variant([("None", ()), ("Some", [builder.primitive("u8")])], path=["my", "Maybe"])
    resolver, _ = make_resolver(builder)
    assert isinstance(resolver.resolve(maybe), Nullable)

    strict, _ = make_resolver(builder, conventions=Conventions(require_path=True))
    assert isinstance(strict.resolve(maybe), DeclarationRef)


def test_custom_option_case_names(builder):
    maybe = builder.variant([("Nothing", ()), ("Just", [builder.primitive("bool")])], path=["Maybe"])
    resolver, _ = make_resolver(builder, conventions=Conventions(option_cases=("Nothing", "Just")))
    assert resolver.resolve(maybe) == Nullable(Scalar("boolean"))


def test_option_shape_must_match(builder):
    # Present case with two fields is not an option.
    odd = builder.variant(
        [("None", ()), ("Some", [builder.primitive("u8"), builder.primitive("u8")])], path=["Odd"]
    )
    resolver, _ = make_resolver(builder)
    assert isinstance(resolver.resolve(odd), DeclarationRef)


# Recursion

def test_self_reference_through_option(builder):
    node = builder.reserve()
    builder.composite(
        [("value", builder.primitive("u32")), ("next", builder.option(node))], path=["list", "Link"], type_id=node
    )
    resolver, collector = make_resolver(builder)
    ref = resolver.resolve(node)

    assert len(collector.declarations) == 1
    nxt = ref.declaration.fields[1].expr
    assert isinstance(nxt, Nullable)
    assert isinstance(nxt.inner, DeclarationRef)
    assert nxt.inner.declaration is ref.declaration
    assert ref.declaration.dependencies() == [ref.declaration]


def test_recursive_tree_entered_through_sequence(tree_doc):
    metadata = parse_metadata(tree_doc)
    collector = DeclarationCollector()
    resolver = TypeResolver(metadata.registry, collector)

    roots = resolver.resolve(metadata.messages[0].return_type)
    assert isinstance(roots, ListOf)
    node = roots.element.declaration
    assert node.name == "Node"
    assert [f.name for f in node.fields] == ["value", "children", "parent"]
    assert node.fields[1].expr == ListOf(roots.element)
    assert node.fields[2].expr.inner.declaration is node

    assert resolver.resolve(metadata.messages[1].return_type).declaration is node
    assert len(collector.declarations) == 1


def test_mutual_recursion(builder):
    a, b = builder.reserve(), builder.reserve()
    builder.composite([("b", builder.sequence(b))], path=["A"], type_id=a)
    builder.variant([("Leaf", ()), ("Branch", [a])], path=["B"], type_id=b)
    resolver, collector = make_resolver(builder)

    ra = resolver.resolve(a)
    rb = resolver.resolve(b)
    assert [d.name for d in collector.declarations] == ["A", "B"]
    assert ra.declaration.fields[0].expr.element.declaration is rb.declaration
    assert rb.declaration.cases[1].fields[0].expr.declaration is ra.declaration


def test_recursive_duplicates_are_merged(builder):
    u32 = builder.primitive("u32")
    first, second = builder.reserve(), builder.reserve()
    builder.composite([("value", u32), ("next", builder.option(first))], path=["a", "Link"], type_id=first)
    builder.composite([("value", u32), ("next", builder.option(second))], path=["b", "Link"], type_id=second)
    resolver, collector = make_resolver(builder)

    assert resolver.resolve(first).declaration is resolver.resolve(second).declaration
    assert len(collector.declarations) == 1
    assert collector.declarations[0].type_ids == [first, second]


def test_cycle_without_declaration(builder):
    s = builder.reserve()
    builder.sequence(s, type_id=s)
    resolver, _ = make_resolver(builder)

    with pytest.raises(RecursionLimitExceededError) as e:
        resolver.resolve(s)
    assert e.value.chain == [s, s]


def test_max_depth(builder):
    t = builder.primitive("u8")
    t = builder.compact(t)
    for _ in range(10):
        t = builder.sequence(t)
    resolver, _ = make_resolver(builder, max_depth=5)

    with pytest.raises(RecursionLimitExceededError) as e:
        resolver.resolve(t)
    assert len(e.value.chain) == 6
    assert e.value.chain[0] == t


def test_nested_declarations_within_default_depth(builder):
    top = contracts.nested_structs(builder, 250)
    resolver, collector = make_resolver(builder)
    limit = sys.getrecursionlimit()

    assert resolver.resolve(top).name == "Level249"
    assert len(collector.declarations) == 250
    assert sys.getrecursionlimit() == limit


def test_nested_declarations_beyond_default_depth(builder):
    top = contracts.nested_structs(builder, 300)
    resolver, _ = make_resolver(builder)

    with pytest.raises(RecursionLimitExceededError) as e:
        resolver.resolve(top)
    assert len(e.value.chain) == 257
    assert e.value.chain[0] == top


def test_interpreter_stack_exhaustion_is_reported(builder, mocker):
    top = contracts.nested_structs(builder, 3)
    resolver, _ = make_resolver(builder)
    mocker.patch.object(resolver, "_dispatch", side_effect=RecursionError)

    with pytest.raises(RecursionLimitExceededError) as e:
        resolver.resolve(top)
    assert e.value.chain == [top]


def test_memoized_instances(erc20_doc):
    metadata = parse_metadata(erc20_doc)
    resolver = TypeResolver(metadata.registry, DeclarationCollector())
    for type_id in metadata.root_type_ids():
        assert resolver.resolve(type_id) is resolver.resolve(type_id)
        assert resolver.resolved(type_id)


# Dedup and naming

def test_structural_duplicates_share_a_declaration(builder):
    u8 = builder.primitive("u8")
    a = builder.composite([("x", u8)], path=["one", "Pos"])
    b = builder.composite([("x", u8)], path=["two", "Place"])
    resolver, collector = make_resolver(builder)

    assert resolver.resolve(a).declaration is resolver.resolve(b).declaration
    assert collector.declarations[0].name == "Pos"
    assert collector.declarations[0].type_ids == [a, b]


def test_colliding_names_use_full_path(builder):
    a = builder.composite([("owner", builder.primitive("str"))], path=["registry", "users", "Info"])
    b = builder.composite([("count", builder.primitive("u32"))], path=["registry", "stats", "Info"])
    resolver, collector = make_resolver(builder)

    assert resolver.resolve(a).name == "Info"
    assert resolver.resolve(b).name == "RegistryStatsInfo"


def test_colliding_names_use_generic_params(builder):
    wrapped_u32 = builder.composite([("inner", builder.primitive("u32"))], path=["Wrapper"],
                                    params=[("T", builder.primitive("u32"))])
    wrapped_bool = builder.composite([("inner", builder.primitive("bool"))], path=["Wrapper"],
                                     params=[("T", builder.primitive("bool"))])
    resolver, _ = make_resolver(builder)

    assert resolver.resolve(wrapped_u32).name == "Wrapper"
    assert resolver.resolve(wrapped_bool).name == "WrapperBool"


def test_colliding_names_use_numeric_suffix(builder):
    ids = [builder.composite([(f"f{i}", builder.primitive("u8"))], path=["Info"]) for i in range(3)]
    resolver, _ = make_resolver(builder)
    assert [resolver.resolve(i).name for i in ids] == ["Info", "Info2", "Info3"]


def test_collision_limit(builder):
    ids = [builder.composite([(f"f{i}", builder.primitive("u8"))], path=["x", "Info"]) for i in range(4)]
    resolver, _ = make_resolver(builder, collision_limit=1)

    assert resolver.resolve(ids[0]).name == "Info"
    assert resolver.resolve(ids[1]).name == "XInfo"
    assert resolver.resolve(ids[2]).name == "Info2"
    with pytest.raises(NameCollisionError) as e:
        resolver.resolve(ids[3])
    assert e.value.name == "Info"
    assert e.value.paths == ["x::Info", "x::Info"]


def test_reserved_names_are_avoided(builder):
    s = builder.composite([("a", builder.primitive("u8"))], path=["Flipper"])
    collector = DeclarationCollector()
    collector.reserve("Flipper")
    resolver, _ = make_resolver(builder, collector=collector)
    assert resolver.resolve(s).name == "Flipper2"


def test_pathless_composite_gets_synthesized_name(builder):
    s = builder.composite([("a", builder.primitive("u8"))])
    resolver, _ = make_resolver(builder)
    assert resolver.resolve(s).name == f"Type{s}"
