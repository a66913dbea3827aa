"""
Schema module behavioral tests (factory contract, field table, kinds).

Scope
- Validate the factory checks: missing, with parameters, wrong return type.
- Validate the annotation -> kind mapping, optional unwrapping and order.
- Validate integer bounds and Schema helpers (find, create, iteration).

Conventions
- Test method names follow CamelCase per project convention.
- Configuration types shared by several tests live at module level so their
  string annotations resolve against this module.
"""
import unittest
from dataclasses import dataclass
from typing import Annotated, ClassVar, Optional, Self, Union
from unittest import TestCase

from flagbind.faults import (
    SchemaFactoryHasArguments,
    SchemaFactoryWrongReturnType,
    SchemaMissingFactory,
    UnsupportedFieldType,
)
from flagbind.schema import (
    Boolean,
    FieldDescriptor,
    Float,
    Integer,
    Schema,
    Text,
    Unsupported,
    describe,
    i8,
    i64,
    u8,
    u16,
)


@dataclass
class Plain:
    count: int = 0
    ratio: float = 1.0
    verbose: bool = False
    name: str = "anonymous"

    @classmethod
    def init(cls) -> "Plain":
        return cls()


class Derived(Plain):
    extra: int = 0


@dataclass
class Mixed:
    small: u8 = 0
    wide: i64 = 0
    nickname: str | None = None
    legacy: Optional[int] = None
    older: Union[float, None] = None
    payload: bytes = b""
    items: list[str] = None
    mapping: dict = None
    either: int | str = 0
    shared: ClassVar[int] = 7

    @staticmethod
    def init() -> "Mixed":
        return Mixed()


class TestFactoryContract(TestCase):
    """The zero-argument factory checks."""

    def testMissingFactoryRejected(self):
        class NoFactory:
            value: int = 0

        with self.assertRaises(SchemaMissingFactory) as context:
            describe(NoFactory)
        self.assertIs(context.exception.type, NoFactory)

    def testNonCallableFactoryRejected(self):
        class NotCallable:
            init = 3

        with self.assertRaises(SchemaMissingFactory):
            describe(NotCallable)

    def testInstanceMethodFactoryHasArguments(self):
        class InstanceMethod:
            def init(self) -> "InstanceMethod":
                return self

        with self.assertRaises(SchemaFactoryHasArguments):
            describe(InstanceMethod)

    def testFactoryWithParametersRejected(self):
        class WithParameter:
            @classmethod
            def init(cls, value) -> "WithParameter":
                return cls()

        with self.assertRaises(SchemaFactoryHasArguments):
            describe(WithParameter)

    def testFactoryWithDefaultedParameterRejected(self):
        class WithDefault:
            @classmethod
            def init(cls, value=1) -> "WithDefault":
                return cls()

        with self.assertRaises(SchemaFactoryHasArguments):
            describe(WithDefault)

    def testFactoryReturningAnotherTypeRejected(self):
        class Other:
            pass

        class WrongReturn:
            @classmethod
            def init(cls) -> Other:
                return Other()

        with self.assertRaises(SchemaFactoryWrongReturnType):
            describe(WrongReturn)

    def testFactoryWithoutReturnAnnotationRejected(self):
        class Undeclared:
            @classmethod
            def init(cls):
                return cls()

        with self.assertRaises(SchemaFactoryWrongReturnType):
            describe(Undeclared)

    def testInheritedFactoryRejectedOnSubclass(self):
        with self.assertRaises(SchemaFactoryWrongReturnType):
            describe(Derived)

    def testSelfReturnAccepted(self):
        class SelfReturning:
            value: int = 0

            @classmethod
            def init(cls) -> Self:
                return cls()

        self.assertEqual([field.name for field in describe(SelfReturning)], ["value"])

    def testStringAnnotationOfLocalClassAccepted(self):
        class Local:
            value: int = 0

            @classmethod
            def init(cls) -> "Local":
                return cls()

        self.assertIs(describe(Local).type, Local)

    def testCustomFactoryName(self):
        class Custom:
            value: int = 0

            @classmethod
            def defaults(cls) -> "Custom":
                return cls()

        self.assertEqual(describe(Custom, factory="defaults").factory, "defaults")
        with self.assertRaises(SchemaMissingFactory):
            describe(Custom)

    def testNonClassRejected(self):
        with self.assertRaises(TypeError):
            describe(Plain())

    def testEmptyFactoryNameRejected(self):
        with self.assertRaises(TypeError):
            describe(Plain, factory=" ")


class TestFields(TestCase):
    """Annotation -> FieldDescriptor mapping."""

    def testBasicKinds(self):
        schema = describe(Plain)
        self.assertEqual(
            [(field.name, field.kind, field.optional) for field in schema],
            [
                ("count", Integer(), False),
                ("ratio", Float(), False),
                ("verbose", Boolean(), False),
                ("name", Text(), False),
            ]
        )

    def testSizedIntegers(self):
        schema = describe(Mixed)
        self.assertEqual(schema.find("small").kind, Integer(8, signed=False))
        self.assertEqual(schema.find("wide").kind, Integer(64, signed=True))

    def testOptionalSpellingsAreUnwrapped(self):
        schema = describe(Mixed)
        self.assertEqual(schema.find("nickname"), FieldDescriptor("nickname", Text(), True, str | None))
        self.assertEqual(schema.find("legacy").kind, Integer())
        self.assertTrue(schema.find("legacy").optional)
        self.assertEqual(schema.find("older").kind, Float())
        self.assertTrue(schema.find("older").optional)

    def testOptionalSizedInteger(self):
        class OptionalSized:
            level: u16 | None = None

            @classmethod
            def init(cls) -> "OptionalSized":
                return cls()

        field = describe(OptionalSized).find("level")
        self.assertEqual(field.kind, Integer(16, signed=False))
        self.assertTrue(field.optional)

    def testPointerLikeFieldsAreUnsupported(self):
        schema = describe(Mixed)
        for name in ("payload", "items", "mapping"):
            with self.subTest(name=name):
                self.assertIsInstance(schema.find(name).kind, Unsupported)

    def testUnionOfSeveralTypesIsUnsupported(self):
        self.assertIsInstance(describe(Mixed).find("either").kind, Unsupported)

    def testClassVarIsSkipped(self):
        self.assertIsNone(describe(Mixed).find("shared"))

    def testDeclarationOrderKept(self):
        self.assertEqual(
            [field.name for field in describe(Mixed)],
            ["small", "wide", "nickname", "legacy", "older", "payload", "items", "mapping", "either"]
        )

    def testCustomIntegerMarker(self):
        class Custom:
            nibble: Annotated[int, Integer(4, signed=False)] = 0

            @classmethod
            def init(cls) -> "Custom":
                return cls()

        self.assertEqual(describe(Custom).find("nibble").kind.bounds, (0, 15))

    def testUnresolvableAnnotationIsAFault(self):
        class Dangling:
            later: "NotDefinedAnywhere" = None  # NOQA: F821

            @classmethod
            def init(cls) -> "Dangling":
                return cls()

        with self.assertRaises(UnsupportedFieldType) as context:
            describe(Dangling)
        self.assertIs(context.exception.type, Dangling)

    def testFindReturnsNoneForUnknownName(self):
        self.assertIsNone(describe(Plain).find("missing"))

    def testLength(self):
        self.assertEqual(len(describe(Plain)), 4)


class TestIntegerKind(TestCase):
    """Bounds and validation of the Integer kind."""

    def testSignedBounds(self):
        self.assertEqual(Integer(8, signed=True).bounds, (-128, 127))

    def testUnsignedBounds(self):
        self.assertEqual(Integer(8, signed=False).bounds, (0, 255))

    def testUnboundedSigned(self):
        self.assertEqual(Integer().bounds, (None, None))

    def testInvalidBitsRejected(self):
        with self.assertRaises(ValueError):
            Integer(0)

    def testAliases(self):
        self.assertEqual(i8.__metadata__, (Integer(8, signed=True),))
        self.assertEqual(u8.__metadata__, (Integer(8, signed=False),))

    def testNames(self):
        self.assertEqual(str(Integer(8, signed=False)), "u8")
        self.assertEqual(str(Integer(32)), "i32")
        self.assertEqual(str(Integer()), "integer")


class TestCreate(TestCase):
    """Schema.create() runs the factory and checks its result."""

    def testCreateReturnsFactoryDefault(self):
        self.assertEqual(describe(Plain).create(), Plain())

    def testCreateReturnsFreshInstances(self):
        schema = describe(Plain)
        self.assertIsNot(schema.create(), schema.create())

    def testCreateRejectsLyingFactory(self):
        class Liar:
            @classmethod
            def init(cls) -> "Liar":
                return object()

        schema = describe(Liar)
        with self.assertRaises(SchemaFactoryWrongReturnType):
            schema.create()

    def testSchemaIsHandBuildable(self):
        schema = Schema(Plain, "init", [FieldDescriptor("count", Integer())])
        self.assertEqual(len(schema), 1)
        self.assertEqual(schema.find("count").kind, Integer())


if __name__ == "__main__":
    unittest.main()
