from xsmcomp.splpaths import expand_path, output_filename, remove_extension


def test_expand_leading_variable():
    env = {"SPLDIR": "/opt/spl"}
    assert expand_path("$SPLDIR/os/boot.spl", env) == env["SPLDIR"] + "/os/boot.spl"


def test_expand_variable_alone():
    env = {"PROG": "/tmp/prog.spl"}
    assert expand_path("$PROG", env) == env["PROG"]


def test_unset_variable_left_unchanged():
    path = "$MISSING/dir/file.spl"
    assert expand_path(path, {}) == path


def test_plain_relative_path_unchanged():
    path = "dir/file.spl"
    assert expand_path(path, {"ir": "x"}) == "x/file.spl"
    assert expand_path(path, {}) == path


def test_remove_extension_keeps_dot():
    name = "timer.spl"
    result = remove_extension(name)
    assert result.endswith(".")
    assert name.startswith(result)
    assert len(result) == name.rfind(".") + 1


def test_remove_extension_without_dot_gives_empty():
    assert remove_extension("noext") == ""


def test_output_filename():
    assert output_filename("os_startup.spl") == "os_startup.xsm"
    assert output_filename("a.b.spl") == remove_extension("a.b.spl") + "xsm"