from xsmcomp.labelmap import NOT_FOUND, LabelMap


def test_find_recorded_labels():
    table = LabelMap()
    table.append("MAIN", 2056)
    table.append("F0", 2100)
    assert table.find("MAIN") == 2056
    assert table.find("F0") == 2100
    assert len(table) == 2


def test_missing_label_gives_not_found():
    table = LabelMap()
    table.append("L4", 2060)
    assert table.find("L5") == NOT_FOUND == -1


def test_first_of_duplicates_wins():
    table = LabelMap()
    table.append("L1", 2048)
    table.append("L1", 3000)
    assert table.find("L1") == 2048


def test_dump_lists_in_order():
    table = LabelMap()
    table.append("MAIN", 2056)
    table.append("L0", 2070)
    assert table.dump() == "MAIN : 2056\nL0 : 2070\n"
    assert LabelMap().dump() == ""