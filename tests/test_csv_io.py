import csv

import pandas as pd
import pytest

from csv_io import CsvFormatError, find_files, format_records, parse_csv, read_header, write_output


def test_read_header_trims_and_keeps_duplicates(write_csv) -> None:
    path = write_csv("a.csv", " id ; name;id;\n1;x;2;\n")
    assert read_header(path) == ["id", "name", "id"]


def test_read_header_skips_leading_blank_lines(write_csv) -> None:
    path = write_csv("a.csv", "\n\na;b\n1;2\n")
    assert read_header(path) == ["a", "b"]


def test_read_header_empty_file(write_csv) -> None:
    assert read_header(write_csv("empty.csv", "")) == []


def test_read_header_missing_name(write_csv) -> None:
    path = write_csv("a.csv", "a;;b\n1;2;3\n")
    with pytest.raises(CsvFormatError, match="column 2"):
        read_header(path)


@pytest.mark.parametrize("text", ['a;""\n1;2\n', "a; \n1;2\n", "a; ;\n1;2\n"])
def test_read_header_missing_last_name(write_csv, text) -> None:
    with pytest.raises(CsvFormatError, match="column 2"):
        read_header(write_csv("a.csv", text))


def test_read_header_trailing_delimiter_only(write_csv) -> None:
    assert read_header(write_csv("a.csv", "a;b;\r\n1;2;\r\n")) == ["a", "b"]


def test_read_header_strips_byte_order_mark(write_csv) -> None:
    path = write_csv("bom.csv", "\ufeffa;b\n1;2\n")
    assert read_header(path) == ["a", "b"]


def test_read_header_undecodable(tmp_path) -> None:
    path = tmp_path / "latin.csv"
    path.write_bytes("café;b\n".encode("latin-1"))
    with pytest.raises(CsvFormatError, match="cannot decode"):
        read_header(str(path))


def test_parse_csv(write_csv) -> None:
    path = write_csv(
        "a.csv",
        'a;a__duplicated_1;b\n 1 ;"x;y";3;\n\n4;"say ""hi"""\n5;6;7;8\n',
    )
    records = parse_csv(path, ["a", "a__duplicated_1", "b"])
    assert records == [
        {"a": "1", "a__duplicated_1": "x;y", "b": "3"},
        {"a": "4", "a__duplicated_1": 'say "hi"'},
        {"a": "5", "a__duplicated_1": "6", "b": "7"},
    ]


def test_parse_csv_multiline_value(write_csv) -> None:
    path = write_csv("a.csv", 'a;b\r\n"line 1\r\nline 2";2\r\n')
    assert parse_csv(path, ["a", "b"]) == [{"a": "line 1\r\nline 2", "b": "2"}]


def test_parse_csv_header_only(write_csv) -> None:
    assert parse_csv(write_csv("a.csv", "a;b\n"), ["a", "b"]) == []


def test_format_records() -> None:
    records = [
        {"a": "1", "b": "2", "c": ""},
        {"a": "", "b": "x;y", "c": 'say "hi"'},
        {"a": " padded ", "b": "two\nlines", "c": "3"},
    ]
    text = format_records(["a", "b", "c"], records)
    assert text == (
        "a;b;c\r\n"
        "1;2;\r\n"
        ';"x;y";"say ""hi"""\r\n'
        'padded;"two\nlines";3\r\n'
    )


def test_format_then_parse_round_trip(tmp_path) -> None:
    keys = ["id", "text", "empty"]
    records = [
        {"id": "1", "text": "semi;colon", "empty": ""},
        {"id": "2", "text": 'quote "q"', "empty": ""},
    ]
    path = tmp_path / "out.csv"
    path.write_text(format_records(keys, records), encoding="utf-8", newline="")

    assert read_header(str(path)) == keys
    parsed = parse_csv(str(path), keys)
    assert [{k: r.get(k, "") for k in keys} for r in parsed] == records

    df = pd.read_csv(path, sep=";", dtype=str, keep_default_na=False)
    assert list(df.columns) == keys
    assert df.to_dict(orient="records") == records


def test_find_files_directory(tmp_path) -> None:
    (tmp_path / "b.csv").write_text("x")
    (tmp_path / "a.csv").write_text("x")
    (tmp_path / "sub").mkdir()
    assert find_files(str(tmp_path)) == [str(tmp_path / "a.csv"), str(tmp_path / "b.csv")]


def test_find_files_glob(tmp_path) -> None:
    for name in ["wave_2.csv", "wave_1.csv", "notes.txt"]:
        (tmp_path / name).write_text("x")
    assert find_files(str(tmp_path / "wave_*.csv")) == [
        str(tmp_path / "wave_1.csv"),
        str(tmp_path / "wave_2.csv"),
    ]


def test_write_output_stdout(capsys) -> None:
    write_output("a;b\r\n1;2\r\n")
    assert capsys.readouterr().out == "a;b\r\n1;2\r\n"


def test_write_output_file_keeps_crlf(tmp_path) -> None:
    out = tmp_path / "merged.csv"
    write_output("a;b\r\n1;2\r\n", str(out))
    assert out.read_bytes() == b"a;b\r\n1;2\r\n"
    with open(out, newline="") as f:
        assert list(csv.reader(f, delimiter=";")) == [["a", "b"], ["1", "2"]]


def test_parse_csv_single_column_empty_values(write_csv) -> None:
    path = write_csv("ids.csv", 'id\n1\n""\n \n\n2\n')
    assert parse_csv(path, ["id"]) == [{"id": "1"}, {"id": ""}, {"id": ""}, {"id": "2"}]


def test_parse_csv_keeps_quoted_empty_last_value(write_csv) -> None:
    path = write_csv("a.csv", 'a;b;c\n1;2;""\n3;4;\n')
    assert parse_csv(path, ["a", "b", "c"]) == [
        {"a": "1", "b": "2", "c": ""},
        {"a": "3", "b": "4"},
    ]


def test_single_column_round_trip(tmp_path) -> None:
    records = [{"id": "1"}, {"id": ""}, {"id": "2"}]
    text = format_records(["id"], records)
    assert text == 'id\r\n1\r\n""\r\n2\r\n'
    path = tmp_path / "ids.csv"
    path.write_text(text, encoding="utf-8", newline="")
    assert parse_csv(str(path), ["id"]) == records


def test_write_output_stdout_is_utf8(capsysbinary) -> None:
    write_output("name\r\nCafé ☕\r\n")
    assert capsysbinary.readouterr().out == "name\r\nCafé ☕\r\n".encode("utf-8")
