import pytest

from inkgen import generate, GeneratorOptions
from inkgen.codegen._collector import Candidate, DeclarationCollector
from inkgen.codegen.typescript import TypeScriptEmitter
from inkgen.codegen.resolved import (
    Scalar, ByteList, BitList, ListOf, FixedList, Group, Nullable, Outcome, DeclarationRef,
    ResolvedField, ResolvedCase, UNIT
)

from support_modules import contracts


@pytest.fixture
def emitter():
    return TypeScriptEmitter()


def declare(kind, members, name="Thing", docs=()):
    collector = DeclarationCollector()
    return collector.intern(Candidate(DeclarationRef(0), kind, members, (name,), [name], docs))


@pytest.mark.parametrize("expr, text", [
    (Scalar("boolean"), "boolean"),
    (Scalar("number"), "number"),
    (Scalar("bignumber"), "number | bigint | string"),
    (Scalar("string"), "string"),
    (UNIT, "null"),
    (ByteList(), "Uint8Array | string"),
    (BitList(), "boolean[]"),
    (ListOf(Scalar("string")), "string[]"),
    (ListOf(Scalar("bignumber")), "(number | bigint | string)[]"),
    (ListOf(ListOf(Scalar("number"))), "number[][]"),
    (FixedList(Scalar("number"), 3), "number[] /* length 3 */"),
    (Group([Scalar("number"), Scalar("boolean")]), "[number, boolean]"),
    (Nullable(Scalar("bignumber")), "number | bigint | string | null"),
    (ListOf(Nullable(Scalar("string"))), "(string | null)[]"),
    (Nullable(UNIT), "true | null"),
    (Outcome(UNIT, Scalar("string")), "{ Ok: null } | { Err: string }"),
])
def test_expressions(emitter, expr, text):
    assert emitter.expression(expr) == text


def test_unit_in_return_position(emitter):
    assert emitter.expression(UNIT, "return") == "void"
    assert emitter.expression(Nullable(UNIT), "return") == "true | null"


def test_reference_renders_its_name(emitter):
    decl = declare("struct", [ResolvedField("a", Scalar("number"))], name="Point")
    ref = DeclarationRef(0)
    ref.bind(decl)
    assert emitter.expression(ListOf(ref)) == "Point[]"


def test_struct_declaration(emitter):
    decl = declare("struct", [
        ResolvedField("name", Scalar("string"), docs=["Token name."]),
        ResolvedField("decimals", Scalar("number")),
        ResolvedField("not-an-identifier", Scalar("boolean")),
    ], name="TokenInfo", docs=["Static token information."])

    assert emitter.declaration(decl) == (
        "/** Static token information. */\n"
        "export interface TokenInfo {\n"
        "  /** Token name. */\n"
        "  name: string;\n"
        "  decimals: number;\n"
        "  \"not-an-identifier\": boolean;\n"
        "}\n"
    )


def test_union_declaration(emitter):
    decl = declare("union", [
        ResolvedCase("Red", 0),
        ResolvedCase("Green", 1, docs=["Grass."]),
        ResolvedCase("Blue", 2, [ResolvedField("value", Scalar("number"), True)]),
        ResolvedCase("Mix", 5, [ResolvedField("field0", Scalar("number"), True),
                                ResolvedField("field1", Scalar("number"), True)]),
    ], name="Color")

    assert emitter.declaration(decl) == (
        "export type Color =\n"
        "  | { type: \"Red\" }\n"
        "  /** Grass. */\n"
        "  | { type: \"Green\" }\n"
        "  | { type: \"Blue\"; value: number }\n"
        "  | { type: \"Mix\"; field0: number; field1: number };\n"
        "\n"
        "export const ColorDiscriminant = {\n"
        "  Red: 0,\n"
        "  Green: 1,\n"
        "  Blue: 2,\n"
        "  Mix: 5,\n"
        "} as const;\n"
    )


def test_empty_union(emitter):
    decl = declare("union", [], name="Never")
    assert emitter.declaration(decl).startswith("export type Never = never;\n")


def test_legacy_union_declaration():
    decl = declare("union", [
        ResolvedCase("Red", 0),
        ResolvedCase("Blue", 2, [ResolvedField("value", Scalar("number"), True)]),
        ResolvedCase("Point", 3, [ResolvedField("x", Scalar("number")), ResolvedField("y", Scalar("number"))]),
    ], name="Color")

    assert TypeScriptEmitter(legacy=True).declaration(decl) == (
        "export interface Color {\n"
        "  Red?: null;\n"
        "  Blue?: number | null;\n"
        "  Point?: { x: number; y: number } | null;\n"
        "}\n"
    )


def test_jsdoc(emitter):
    assert emitter.jsdoc([]) == ""
    assert emitter.jsdoc(["", " One line. ", ""]) == "/** One line. */\n"
    assert emitter.jsdoc(["First.", "", "Second */ end."]) == (
        "/**\n * First.\n *\n * Second *\\/ end.\n */\n"
    )
    assert emitter.jsdoc(["Flips."], ["@payable"]) == "/**\n * Flips.\n * @payable\n */\n"


# Generated modules

def test_flipper_module(flipper_doc):
    module = generate(flipper_doc).module

    assert module.startswith("/* eslint-disable */\n// Generated by inkgen from the metadata of contract flipper 0.1.0.")
    assert "export interface TransactionHandle {" in module
    assert "  hash(): string;\n" in module
    assert "  wait(timeout?: number): Promise<TransactionReceipt>;\n" in module
    assert "export interface FlipperConstructorArgs {" in module
    assert "  new: [init_value: boolean];\n" in module
    assert "  default: [];\n" in module
    assert "  get(): Promise<{ Ok: boolean } | { Err: LangError }>;\n" in module
    assert "  flip(): Promise<TransactionHandle>;\n" in module
    assert "export interface FlipperEvents {\n}\n" in module
    assert "export interface Flipper {\n  readonly address: string;\n" in module


def test_transactions_ignore_nominal_return_type(erc20_doc):
    module = generate(erc20_doc).module
    transactions = module[module.index("export interface Erc20Transactions"):]
    transactions = transactions[:transactions.index("\n}\n")]

    assert "transfer(to: string, value: number | bigint | string): Promise<TransactionHandle>;" in transactions
    assert "transfer_from(from_: string, to: string, value: number | bigint | string): Promise<TransactionHandle>;" \
        in transactions
    assert "Error_" not in transactions


def test_queries_use_nominal_return_type(erc20_doc):
    module = generate(erc20_doc).module
    assert "  token_info(): Promise<{ Ok: TokenInfo } | { Err: LangError }>;\n" in module
    assert "  balance_of(owner: string): Promise<{ Ok: number | bigint | string } | { Err: LangError }>;\n" in module


def test_events(erc20_doc):
    module = generate(erc20_doc).module
    assert (
        "/** Emitted on every transfer. */\n"
        "export interface TransferEvent {\n"
        "  /** @indexed */\n"
        "  from: string | null;\n"
        "  /** @indexed */\n"
        "  to: string | null;\n"
        "  value: number | bigint | string;\n"
        "}\n"
    ) in module
    assert "export interface Erc20Events {\n  Transfer: TransferEvent;\n  Approval: ApprovalEvent;\n}\n" in module


def test_argument_names_are_sanitized(builder):
    boolean = builder.primitive("bool")
    builder.message("set", [("new", boolean), ("class", boolean), ("2nd", boolean)], mutates=True)
    module = generate(builder.build()).module
    assert "  set(new_: boolean, class_: boolean, _2nd: boolean): Promise<TransactionHandle>;\n" in module


def test_namespaced_message_labels_are_quoted(builder):
    builder.message("PSP22::total_supply", returns=builder.primitive("u128"))
    module = generate(builder.build()).module
    assert '  "PSP22::total_supply"(): Promise<number | bigint | string>;\n' in module


def test_legacy_option(erc20_doc):
    module = generate(erc20_doc, GeneratorOptions(legacy=True)).module
    assert "export interface Error_ {\n  InsufficientBalance?: null;\n" in module
    assert "Error_Discriminant" not in module


def test_declarations_precede_surface(erc20_doc):
    module = generate(erc20_doc).module
    assert module.index("export interface TokenInfo") < module.index("export interface Erc20Queries")
    assert module.index("export type Error_") < module.index("export interface Erc20ConstructorArgs")


def test_recursive_module(tree_doc):
    module = generate(tree_doc).module
    assert (
        "export interface Node {\n"
        "  value: number;\n"
        "  children: Node[];\n"
        "  parent: Node | null;\n"
        "}\n"
    ) in module
    assert module.count("export interface Node ") == 1
    assert "  roots(): Promise<Node[]>;\n" in module


def test_collision_module():
    module = generate(contracts.colliding_names()).module
    assert "export interface Info {\n  owner: string;\n}\n" in module
    assert "export interface RegistryStatsInfo {\n  count: number;\n}\n" in module
    assert "  stats(): Promise<RegistryStatsInfo>;\n" in module
