import unittest

from bfopt import (
    Op,
    OpKind,
    TranslationError,
    UnmatchedCloseBracket,
    UnterminatedLoop,
    optimize_loop,
    reoptimize,
    translate,
)
from bfopt.ops import disassemble, format_op


HELLO_WORLD = (
    "++++++++[>++++[>++>+++>+++>+<<<<-]>+>+>->>+[<]<-]"
    ">>.>---.+++++++..+++.>>.<-.<.+++.------.--------.>>+.>++."
)


def ops(*pairs):
    return tuple(Op(kind, argument) for kind, argument in pairs)


class RunLengthTests(unittest.TestCase):
    def test_collapses_runs_of_identical_operators(self) -> None:
        program = translate("+++>><---..,")
        self.assertEqual(
            program,
            ops(
                (OpKind.ADD, 3),
                (OpKind.MOVE, 2),
                (OpKind.MOVE, -1),
                (OpKind.ADD, -3),
                (OpKind.WRITE, 2),
                (OpKind.READ, 1),
            ),
        )

    def test_alternating_operators_are_not_merged(self) -> None:
        program = translate("+-+")
        self.assertEqual(
            program,
            ops((OpKind.ADD, 1), (OpKind.ADD, -1), (OpKind.ADD, 1)),
        )

    def test_inert_bytes_become_comments(self) -> None:
        program = translate("ab  c")
        self.assertEqual(
            program,
            ops(
                (OpKind.COMMENT, 1),
                (OpKind.COMMENT, 1),
                (OpKind.COMMENT, 2),
                (OpKind.COMMENT, 1),
            ),
        )

    def test_accepts_bytes_with_non_ascii_content(self) -> None:
        program = translate(b"\xff\xff+")
        self.assertEqual(program, ops((OpKind.COMMENT, 2), (OpKind.ADD, 1)))

    def test_empty_source(self) -> None:
        self.assertEqual(translate(""), ())


class BracketMatchingTests(unittest.TestCase):
    def test_generic_loop_targets_point_at_partner(self) -> None:
        program = translate("+[.>]")
        self.assertEqual(
            program,
            ops(
                (OpKind.ADD, 1),
                (OpKind.JUMP_IF_ZERO, 4),
                (OpKind.WRITE, 1),
                (OpKind.MOVE, 1),
                (OpKind.JUMP_IF_NONZERO, 1),
            ),
        )

    def test_empty_loop_is_a_generic_pair(self) -> None:
        self.assertEqual(
            translate("[]"),
            ops((OpKind.JUMP_IF_ZERO, 1), (OpKind.JUMP_IF_NONZERO, 0)),
        )

    def test_nested_loops_are_backpatched(self) -> None:
        program = translate("[>[.]<]")
        self.assertEqual(program[0], Op(OpKind.JUMP_IF_ZERO, 6))
        self.assertEqual(program[2], Op(OpKind.JUMP_IF_ZERO, 4))
        self.assertEqual(program[4], Op(OpKind.JUMP_IF_NONZERO, 2))
        self.assertEqual(program[6], Op(OpKind.JUMP_IF_NONZERO, 0))

    def test_unmatched_close_bracket_reports_offset(self) -> None:
        with self.assertRaises(UnmatchedCloseBracket) as ctx:
            translate("+]")
        self.assertEqual(ctx.exception.offset, 1)
        self.assertIn("offset 1", str(ctx.exception))

    def test_unmatched_close_after_balanced_loop(self) -> None:
        with self.assertRaises(UnmatchedCloseBracket) as ctx:
            translate("[]][")
        self.assertEqual(ctx.exception.offset, 2)

    def test_unterminated_loop_reports_innermost_open(self) -> None:
        with self.assertRaises(UnterminatedLoop) as ctx:
            translate("[[+]+[")
        self.assertEqual(ctx.exception.offset, 5)

    def test_translation_errors_share_a_base_class(self) -> None:
        for source in ("]", "["):
            with self.assertRaises(TranslationError):
                translate(source)


class OptimizerTests(unittest.TestCase):
    def test_single_add_becomes_clear(self) -> None:
        self.assertEqual(translate("+[-]"), ops((OpKind.ADD, 1), (OpKind.CLEAR, 0)))
        self.assertEqual(translate("[+++]"), ops((OpKind.CLEAR, 0)))

    def test_single_move_becomes_scan(self) -> None:
        self.assertEqual(translate("[>>]"), ops((OpKind.SCAN, 2)))
        self.assertEqual(translate("[<]"), ops((OpKind.SCAN, -1)))

    def test_transfer_right(self) -> None:
        self.assertEqual(
            translate("+++[->+<]"),
            ops((OpKind.ADD, 3), (OpKind.TRANSFER, 1)),
        )

    def test_transfer_left_with_wider_offset(self) -> None:
        self.assertEqual(translate("[-<<<+>>>]"), ops((OpKind.TRANSFER, -3)))

    def test_transfer_increment_first_polarity(self) -> None:
        self.assertEqual(translate("[+<->]"), ops((OpKind.TRANSFER, -1)))

    def test_transfer_shape_deviations_stay_generic(self) -> None:
        for source in ("[->+<<]", "[-->+<]", "[->++<]", "[->-<]", "[>-<+]", "[-<+>>]"):
            with self.subTest(source=source):
                program = translate(source)
                self.assertEqual(program[0].kind, OpKind.JUMP_IF_ZERO)
                self.assertEqual(program[-1], Op(OpKind.JUMP_IF_NONZERO, 0))

    def test_comment_inside_loop_prevents_fusion(self) -> None:
        program = translate("[- ]")
        self.assertEqual(len(program), 4)
        self.assertEqual(program[0], Op(OpKind.JUMP_IF_ZERO, 3))

    def test_outer_loop_around_fused_op_stays_generic(self) -> None:
        self.assertEqual(
            translate("[[-]]"),
            ops(
                (OpKind.JUMP_IF_ZERO, 2),
                (OpKind.CLEAR, 0),
                (OpKind.JUMP_IF_NONZERO, 0),
            ),
        )

    def test_optimize_loop_rejects_other_bodies(self) -> None:
        self.assertIsNone(optimize_loop([]))
        self.assertIsNone(optimize_loop([Op(OpKind.WRITE, 1)]))
        self.assertIsNone(optimize_loop([Op(OpKind.CLEAR)]))
        self.assertIsNone(
            optimize_loop(
                [
                    Op(OpKind.ADD, -1),
                    Op(OpKind.MOVE, 0),
                    Op(OpKind.ADD, 1),
                    Op(OpKind.MOVE, 0),
                ]
            )
        )

    def test_unoptimized_translation_keeps_loops(self) -> None:
        program = translate("+++[->+<]", optimize=False)
        self.assertEqual(
            program,
            ops(
                (OpKind.ADD, 3),
                (OpKind.JUMP_IF_ZERO, 6),
                (OpKind.ADD, -1),
                (OpKind.MOVE, 1),
                (OpKind.ADD, 1),
                (OpKind.MOVE, -1),
                (OpKind.JUMP_IF_NONZERO, 1),
            ),
        )


class ReoptimizeTests(unittest.TestCase):
    SOURCES = (
        HELLO_WORLD,
        "+++[->+<]>[-]<[>]",
        "[[-]>]",
        ",[.,]",
        "++[>+[-<+>]<-]",
    )

    def test_reoptimizing_unfused_matches_direct_translation(self) -> None:
        for source in self.SOURCES:
            with self.subTest(source=source):
                self.assertEqual(
                    reoptimize(translate(source, optimize=False)),
                    translate(source),
                )

    def test_reoptimizing_fused_program_is_a_no_op(self) -> None:
        for source in self.SOURCES:
            with self.subTest(source=source):
                program = translate(source)
                self.assertEqual(reoptimize(program), program)
                self.assertEqual(reoptimize(reoptimize(program)), program)


class ListingTests(unittest.TestCase):
    def test_format_op(self) -> None:
        self.assertEqual(format_op(Op(OpKind.CLEAR)), "clear")
        self.assertTrue(format_op(Op(OpKind.SCAN, -1)).startswith("scan"))
        self.assertTrue(format_op(Op(OpKind.SCAN, -1)).endswith(" -1"))

    def test_disassemble_numbers_each_operation(self) -> None:
        listing = disassemble(translate("+[-]>[.]"))
        lines = listing.splitlines()
        self.assertEqual(len(lines), 6)
        self.assertTrue(lines[0].startswith("0000  add"))
        self.assertTrue(lines[1].startswith("0001  clear"))
        self.assertTrue(lines[3].startswith("0003  jz"))


if __name__ == "__main__":
    unittest.main()
