import struct

from wordgrid.trie import MAGIC, MAX_WORD_LENGTH, VERSION, Trie


def _sample() -> Trie:
    return Trie({
        "CAT": ["cat"],
        "CATS": ["cats"],
        "QUIT": ["quit"],
        "NAIVE": ["naive", "naïve"],
        "DOG": [],
    })


def test_insert_and_contains():
    trie = _sample()
    assert "CAT" in trie
    assert "CATS" in trie
    assert "CA" not in trie
    assert "CATSS" not in trie
    assert len(trie) == 5


def test_insert_is_idempotent():
    trie = Trie()
    trie.insert("CAT", ["cat"])
    trie.insert("CAT", ["cat"])
    assert len(trie) == 1
    assert trie.spellings("CAT") == ("cat",)


def test_insert_merges_new_spellings():
    trie = Trie()
    trie.insert("COOPERATE", ["cooperate"])
    trie.insert("COOPERATE", ["co-operate", "cooperate"])
    assert trie.spellings("COOPERATE") == ("cooperate", "co-operate")
    assert len(trie) == 1


def test_descend_single_letters():
    trie = _sample()
    node = trie.descend(trie.root, "C")
    node = trie.descend(node, "A")
    assert trie.is_terminal(node) == (False, ())
    node = trie.descend(node, "T")
    assert trie.is_terminal(node) == (True, ("cat",))


def test_descend_multi_letter_symbol():
    trie = _sample()
    node = trie.descend(trie.root, "QU")
    assert node is not None
    node = trie.descend(node, "I")
    node = trie.descend(node, "T")
    assert trie.is_terminal(node) == (True, ("quit",))


def test_descend_missing_child_returns_none():
    trie = _sample()
    assert trie.descend(trie.root, "Z") is None
    assert trie.descend(trie.root, "QX") is None
    assert trie.descend(trie.root, "") is None


def test_word_without_spellings_is_terminal():
    trie = _sample()
    assert trie.is_terminal(trie.find("DOG")) == (True, ())


def test_words_listing():
    trie = _sample()
    assert trie.words() == {
        "CAT": ("cat",),
        "CATS": ("cats",),
        "DOG": (),
        "NAIVE": ("naive", "naïve"),
        "QUIT": ("quit",),
    }


def test_serialize_round_trip():
    trie = _sample()
    data = trie.serialize()
    assert struct.unpack(">II", data[:8]) == (MAGIC, VERSION)

    restored = Trie.deserialize(data)
    assert restored is not None
    assert restored == trie
    assert restored.words() == trie.words()
    assert len(restored) == len(trie)
    assert restored.spellings("NAIVE") == ("naive", "naïve")


def test_serialize_empty_trie():
    restored = Trie.deserialize(Trie().serialize())
    assert restored is not None
    assert len(restored) == 0


def test_deserialize_wrong_magic():
    data = bytearray(_sample().serialize())
    data[0:4] = struct.pack(">I", 0x12345678)
    assert Trie.deserialize(bytes(data)) is None


def test_deserialize_wrong_version():
    data = bytearray(_sample().serialize())
    data[4:8] = struct.pack(">I", VERSION + 1)
    assert Trie.deserialize(bytes(data)) is None


def test_deserialize_truncated():
    data = _sample().serialize()
    assert Trie.deserialize(data[:3]) is None
    assert Trie.deserialize(data[:-1]) is None
    assert Trie.deserialize(data + b"\x00") is None


def test_deserialize_garbage_payload():
    data = struct.pack(">II", MAGIC, VERSION) + b"\x07\xff\xff"
    assert Trie.deserialize(data) is None


def _nested_payload(depth: int) -> bytes:
    """Nodes nested ``depth`` levels deep, ending in the one word "A" * depth."""
    data = bytearray(struct.pack(">II", MAGIC, VERSION))
    for _ in range(depth):
        data += b"\x00" + struct.pack(">H", 1) + struct.pack(">H", 1) + b"A"
    data += b"\x01" + struct.pack(">H", 0) + struct.pack(">H", 0)
    return bytes(data)


def test_deserialize_longest_word():
    restored = Trie.deserialize(_nested_payload(MAX_WORD_LENGTH))
    assert restored is not None
    assert "A" * MAX_WORD_LENGTH in restored


def test_deserialize_too_deeply_nested():
    assert Trie.deserialize(_nested_payload(MAX_WORD_LENGTH + 1)) is None
    assert Trie.deserialize(_nested_payload(2000)) is None
