from hackasm.cli import build_arg_parser, main


def test_writes_hack_file_next_to_source(write_source, loop_source):
    source = write_source(loop_source)
    assert main([str(source)]) == 0
    words = source.with_suffix(".hack").read_text(encoding="utf-8").splitlines()
    assert len(words) == 6
    assert words[2] == "0000000000000100"


def test_explicit_output_and_listing(write_source, loop_source, tmp_path):
    source = write_source(loop_source)
    out = tmp_path / "out" / "prog.hack"
    out.parent.mkdir()
    listing = tmp_path / "prog.lst"
    assert main([str(source), "-o", str(out), "-l", str(listing)]) == 0
    assert out.read_text(encoding="utf-8").endswith("0000000000010000\n")
    assert "(LOOP)" in listing.read_text(encoding="utf-8")


def test_stdout_mode_prints_words(write_source, capsys):
    source = write_source(["@2", "D=A"])
    assert main([str(source), "--stdout"]) == 0
    assert capsys.readouterr().out.splitlines() == ["0000000000000010", "1110110000010000"]
    assert not source.with_suffix(".hack").exists()


def test_assembly_error_exits_nonzero(write_source):
    source = write_source(["@1", "D=D*D"])
    assert main([str(source)]) == 1
    assert not source.with_suffix(".hack").exists()


def test_missing_input_exits_nonzero(tmp_path):
    assert main([str(tmp_path / "missing.asm")]) == 1


def test_arg_parser_defaults():
    args = build_arg_parser().parse_args(["prog.asm"])
    assert args.output is None
    assert args.listing is None
    assert not args.stdout
    assert not args.verbose
