# laado

`laado` is the shared middle of a small compiler toolchain. It takes an
abstract syntax tree and either runs it directly or lowers it to a JVM class
file. It contains:

- **An abstract syntax tree.** `laado.types` holds the node kinds (`AstType`),
  the data types, `Var`, `AstStruct`, `AstClass`, `AstEnum`, and `AstBlock`
  with its symbol table. `laado.expressions` holds literals, identifiers, array
  and structure access, calls, and the unary and binary operators.
  `laado.statements` holds the statements and `AstTree`, which represents a whole
  file. `laado.builder` has shorthand constructors for the data types, such as
  `build_int32_type()` and `build_pointer_type(base)`.
- **A debug printer.** `laado.debug` turns nodes into readable text.
  `format_tree(tree)` returns the text for a whole tree, and `print_tree(tree)`
  writes it to standard output. `format_expression`, `format_statement`,
  `format_block`, `format_struct`, `format_class` and `format_data_type` each
  render one part of the tree.
- **A tree-walking interpreter.** `laado.interpreter.AstInterpreter` runs the
  `main` function of a tree. It supports:
  - integer and string scalars and arrays;
  - `if` and `while`;
  - calls to functions in the tree;
  - the built-in `print` and `length` calls, and `malloc` / `gc_alloc` for
    array allocation.

  `run()` returns the value `main` leaves, as a signed 32-bit integer. Output
  goes to standard output, or to the text stream passed as `output`. Errors
  raise `laado.evaluator.InterpreterError`. Examples are a missing `main`, an
  unknown function, an index out of range, or division by zero. The expression
  evaluation itself is in `laado.evaluator.ExpressionEvaluator`.
- **A JVM back end.**
  - `laado.classfile` models and serialises the class-file format: constant-pool
    entries, `Instruction`, `CodeBlock`, `JavaMethod` and `ClassFile`.
  - `laado.classbuilder.JavaClassBuilder` manages the constant pool and emits
    bytecode.
  - `laado.javacompiler.JavaCompiler` lowers a tree into a class.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Building a tree and running it

```python
from laado.builder import build_int32_type
from laado.expressions import AstAddOp, AstAssignOp, AstExprList, AstID, AstInt
from laado.statements import (
    AstExprStatement, AstFuncCallStmt, AstFunction, AstReturnStmt, AstTree, AstVarDec,
)
from laado.interpreter import AstInterpreter

tree = AstTree("example.ly")
main = AstFunction("main", build_int32_type())

main.add_statement(AstVarDec("x", build_int32_type()))
main.add_statement(
    AstExprStatement(
        AstAssignOp(AstID("x"), AstAddOp(AstInt(40), AstInt(2))),
        build_int32_type(),
    )
)
main.add_statement(AstFuncCallStmt("print", AstExprList([AstID("x")])))
main.add_statement(AstReturnStmt(AstInt(0)))

tree.add_global_statement(main)

exit_code = AstInterpreter(tree).run()   # prints "42", returns 0
```

## Inspecting a tree

```python
from laado.debug import format_tree, print_tree

text = format_tree(tree)
print_tree(tree)
```

## Emitting a JVM class

```python
from laado.javacompiler import JavaCompiler, get_class_name

name = get_class_name("src/Hello.ly")       # "Hello"
compiler = JavaCompiler(name)
compiler.build(tree)
data = compiler.to_bytes()                  # bytes starting with 0xCAFEBABE
path = compiler.write(".")                  # writes ./Hello.class and returns its path
```

The compiler handles the following:

- a constructor, which is the function named after the class;
- `int32` and object variables;
- assignments and integer arithmetic;
- calls such as `println`;
- returns without a value.

For lower-level work, use `JavaClassBuilder` directly:

1. Import methods and fields with `import_method` and `import_field`.
2. Create methods with `create_method`.
3. Add instructions to them, such as `create_bipush`, `create_iadd` or
   `create_invokevirtual`.
4. Serialise the class with `to_bytes()` or `write(stream)`.

## What it does not do

- There is no parser and no command-line tool. Trees are built in Python from
  the node classes.
- There is no native code generation.
- The interpreter does not store float variables. `run_fexpression` evaluates
  float literals and arithmetic only.
- The interpreter runs `if` and `while`. `for`, `repeat`, `break`, `continue`
  and structures are not run.