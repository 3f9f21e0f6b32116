import io

import pytest

from laado.builder import build_int32_type, build_pointer_type, build_string_type
from laado.evaluator import InterpreterError, IntrContext
from laado.expressions import (
    AstAddOp,
    AstArrayAccess,
    AstAssignOp,
    AstExprList,
    AstFloat,
    AstFuncCallExpr,
    AstID,
    AstInt,
    AstLTOp,
    AstMulOp,
    AstString,
)
from laado.interpreter import AstInterpreter
from laado.statements import (
    AstExprStatement,
    AstFuncCallStmt,
    AstFunction,
    AstIfStmt,
    AstReturnStmt,
    AstTree,
    AstVarDec,
    AstWhileStmt,
)
from laado.types import AstBlock, AstType, Var


def int32():
    return build_int32_type(False)


def make_block(*stmts):
    block = AstBlock()
    for stmt in stmts:
        block.add_statement(stmt)
    return block


def make_tree(*funcs):
    tree = AstTree("test.lo")
    for func in funcs:
        tree.add_global_statement(func)
    return tree


def make_func(name, data_type, *stmts, args=()):
    func = AstFunction(name, data_type)
    func.args.extend(args)
    for stmt in stmts:
        func.add_statement(stmt)
    return func


def assign(name, value, data_type=None):
    return AstExprStatement(AstAssignOp(AstID(name), value), data_type or int32())


def print_stmt(*args):
    return AstFuncCallStmt("print", AstExprList(args))


def run_main(*stmts, extra=(), data_type=None):
    out = io.StringIO()
    main = make_func("main", data_type or int32(), *stmts)
    interp = AstInterpreter(make_tree(main, *extra), out)
    result = interp.run()
    return result, out.getvalue()


def test_main_returns_literal():
    result, _ = run_main(AstReturnStmt(AstInt(7)))
    assert result == 7


def test_missing_main_raises():
    interp = AstInterpreter(make_tree(make_func("other", int32())))
    with pytest.raises(InterpreterError):
        interp.run()


def test_print_literal_and_variable():
    _, out = run_main(
        AstVarDec("x", int32()),
        assign("x", AstInt(5)),
        print_stmt(AstString("x="), AstID("x")),
    )
    assert out == "x=5\n"


def test_while_loop_counts_to_limit():
    loop = AstWhileStmt(
        AstLTOp(AstID("i"), AstInt(5)),
        make_block(assign("i", AstAddOp(AstID("i"), AstInt(1)))),
    )
    result, _ = run_main(AstVarDec("i", int32()), loop, AstReturnStmt(AstID("i")))
    assert result == 5


@pytest.mark.parametrize("cond, expected", [(1, 10), (0, 20)])
def test_if_selects_branch(cond, expected):
    stmt = AstIfStmt(
        AstInt(cond),
        make_block(AstReturnStmt(AstInt(10))),
        make_block(AstReturnStmt(AstInt(20))),
    )
    result, _ = run_main(stmt)
    assert result == expected


def test_call_user_function_with_arguments():
    add = make_func(
        "add",
        int32(),
        AstReturnStmt(AstAddOp(AstID("a"), AstID("b"))),
        args=[Var(name="a", type=int32()), Var(name="b", type=int32())],
    )
    call = AstFuncCallExpr("add", AstExprList([AstInt(2), AstInt(3)]))
    result, _ = run_main(AstReturnStmt(call), extra=(add,))
    assert result == 2 + 3


def test_array_allocation_and_print():
    alloc = AstFuncCallExpr("malloc", AstExprList([AstMulOp(AstInt(4), AstInt(3))]))
    _, out = run_main(
        AstVarDec("arr", build_pointer_type(int32())),
        assign("arr", alloc),
        assign("", AstInt(0)) if False else AstExprStatement(
            AstAssignOp(AstArrayAccess("arr", AstInt(1)), AstInt(9)), int32()
        ),
        print_stmt(AstID("arr")),
    )
    assert out == "[0, 9, 0]\n"


def test_length_of_string_literal():
    text = "abcd"
    call = AstFuncCallExpr("length", AstExprList([AstString(text)]))
    _, out = run_main(print_stmt(call))
    assert out == f"{len(text)}\n"


def test_string_function_result_printed():
    greet = make_func("greet", build_string_type(), AstReturnStmt(AstString("hi")))
    call = AstFuncCallExpr("greet", AstExprList([]))
    _, out = run_main(print_stmt(call), extra=(greet,))
    assert out == "hi\n"


def test_unknown_type_in_binary_print():
    _, out = run_main(print_stmt(AstAddOp(AstID("nope"), AstID("nada"))))
    assert out == "[ERR:<UNK_TYPE>]\n"


def test_invalid_expression_in_print():
    _, out = run_main(print_stmt(AstFloat(1.5)))
    assert out.startswith("[ERR:INVALID_EXPR]: ")


def test_interpret_type():
    interp = AstInterpreter(make_tree())
    ctx = IntrContext()
    assert interp.interpret_type(ctx, AstInt(1)).type is AstType.INT32
    assert interp.interpret_type(ctx, AstString("s")) is None
    ctx.type_map["s"] = build_string_type()
    found = interp.interpret_type(ctx, AstAddOp(AstInt(1), AstID("s")))
    assert found.type is AstType.INT32


def test_run_var_decl_string_and_array():
    interp = AstInterpreter(make_tree())
    ctx = IntrContext()
    interp.run_var_decl(ctx, AstVarDec("name", build_string_type()))
    interp.run_var_decl(ctx, AstVarDec("list", build_pointer_type(build_string_type())))
    assert ctx.svar_map["name"] == ""
    assert ctx.sarray_map["list"] == []
    assert ctx.type_map["list"].type is AstType.STRING


def test_unknown_function_call_raises():
    call = AstFuncCallStmt("missing", AstExprList([]))
    with pytest.raises(InterpreterError):
        run_main(call)