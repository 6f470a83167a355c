"""Tests for path helpers, entries, descriptors and directory synthesis."""

import unittest

import vpath
from archive import (
    ArchiveDescriptor,
    ArchiveEntry,
    InvalidArgumentError,
    PLACEHOLDER_FILE_NAME,
    PLACEHOLDER_HEADER,
    StatInfo,
)
from listing import find_directory, list_children, subtree_size


class TestPaths(unittest.TestCase):
    def test_join_root(self):
        self.assertEqual(vpath.join("", "a.txt"), "a.txt")
        self.assertEqual(vpath.join("", "/a.txt"), "/a.txt")

    def test_join_strips_separators(self):
        self.assertEqual(vpath.join("dir/", "/a.txt"), "dir/a.txt")
        self.assertEqual(vpath.join("dir\\", "\\a.txt"), "dir/a.txt")
        self.assertEqual(vpath.join("a/b", "c"), "a/b/c")

    def test_relative_root_returns_path(self):
        self.assertEqual(vpath.relative("", "a/b.txt"), "a/b.txt")
        self.assertEqual(vpath.relative("", "/a/b.txt/"), "a/b.txt")

    def test_relative_under_prefix(self):
        self.assertEqual(vpath.relative("scripts", "scripts/common.j"), "common.j")
        self.assertEqual(vpath.relative("Scripts", "SCRIPTS/ai/x.ai"), "ai/x.ai")

    def test_relative_back_slash(self):
        self.assertEqual(vpath.relative("scripts", "scripts\\common.j"), "common.j")
        self.assertEqual(vpath.relative("a\\b", "a/b/c"), "c")

    def test_relative_outside_prefix(self):
        self.assertIsNone(vpath.relative("scripts", "scriptsx/common.j"))
        self.assertIsNone(vpath.relative("scripts", "other/common.j"))
        self.assertIsNone(vpath.relative("scripts", "scripts"))
        self.assertIsNone(vpath.relative("long/prefix", "a"))

    def test_split_first_segment(self):
        self.assertEqual(vpath.split_first_segment("file.txt"), ("file.txt", ""))
        self.assertEqual(vpath.split_first_segment("dir/file.txt"), ("dir", "file.txt"))
        self.assertEqual(vpath.split_first_segment("dir\\sub/file.txt"), ("dir", "sub/file.txt"))

    def test_basename(self):
        self.assertEqual(vpath.basename("a/b/c.txt"), "c.txt")
        self.assertEqual(vpath.basename("a\\b\\c.txt"), "c.txt")
        self.assertEqual(vpath.basename("c.txt"), "c.txt")

    def test_fold(self):
        self.assertEqual(vpath.fold("Units\\Human.SLK"), "units/human.slk")
        self.assertEqual(vpath.fold("/a/B/"), "a/b")


class TestArchiveEntry(unittest.TestCase):
    def test_size_matches_data(self):
        entry = ArchiveEntry("a.txt", b"hello")
        self.assertEqual(entry.size, 5)

    def test_data_is_converted_to_bytes(self):
        entry = ArchiveEntry("a.txt", bytearray(b"abc"))
        self.assertIsInstance(entry.data, bytes)
        self.assertEqual(entry.size, 3)

    def test_empty_path_rejected(self):
        with self.assertRaises(InvalidArgumentError):
            ArchiveEntry("", b"")
        with self.assertRaises(InvalidArgumentError):
            ArchiveEntry("//", b"")

    def test_invalid_argument_is_value_error(self):
        with self.assertRaises(ValueError):
            ArchiveEntry("", b"")

    def test_from_text(self):
        entry = ArchiveEntry.from_text("note.txt", "héllo")
        self.assertEqual(entry.data, "héllo".encode("utf-8"))


class TestArchiveDescriptor(unittest.TestCase):
    def setUp(self):
        self.d = ArchiveDescriptor.from_records([
            ("intro.txt", b"x" * 10),
            ("war3map.j", b"y" * 500),
            ("scripts/common.j", b"z" * 200),
        ])

    def test_total_size(self):
        self.assertEqual(self.d.total_size, 710)
        self.assertEqual(len(self.d), 3)

    def test_order_preserved(self):
        self.assertEqual([e.path for e in self.d.entries],
                         ["intro.txt", "war3map.j", "scripts/common.j"])

    def test_find_entry_case_insensitive(self):
        self.assertIs(self.d.find_entry("INTRO.TXT"), self.d.entries[0])
        self.assertIs(self.d.find_entry("Scripts/Common.J"), self.d.entries[2])

    def test_find_entry_back_slash(self):
        self.assertIs(self.d.find_entry("scripts\\common.j"), self.d.entries[2])

    def test_find_entry_missing(self):
        self.assertIsNone(self.d.find_entry("nope.txt"))
        self.assertIsNone(self.d.find_index("nope.txt"))

    def test_duplicate_paths_first_wins(self):
        d = ArchiveDescriptor.from_records([("a.txt", b"first"), ("A.TXT", b"second")])
        self.assertEqual(d.find_entry("a.txt").data, b"first")
        self.assertEqual(d.find_index("a.txt"), 0)
        self.assertEqual(d.total_size, 11)

    def test_back_slash_entry_found_by_forward_slash(self):
        d = ArchiveDescriptor.from_records([("Units\\Human.slk", b"data")])
        self.assertEqual(d.find_entry("units/human.slk").data, b"data")

    def test_from_tree(self):
        d = ArchiveDescriptor.from_tree({
            "readme.txt": "Hello",
            "docs": {"guide.txt": b"A guide"},
        })
        self.assertEqual([e.path for e in d.entries], ["readme.txt", "docs/guide.txt"])
        self.assertEqual(d.find_entry("readme.txt").data, b"Hello")

    def test_empty_descriptor(self):
        d = ArchiveDescriptor([])
        self.assertEqual(d.total_size, 0)
        self.assertEqual(list_children(d, ""), ((), ()))


class TestPlaceholder(unittest.TestCase):
    def test_single_entry(self):
        d = ArchiveDescriptor.placeholder("Something went wrong")
        self.assertEqual(len(d), 1)
        entry = d.entries[0]
        self.assertEqual(entry.path, PLACEHOLDER_FILE_NAME)
        self.assertEqual(entry.data, f"{PLACEHOLDER_HEADER}\r\nSomething went wrong\r\n".encode())
        self.assertEqual(d.total_size, entry.size)

    def test_from_path(self):
        d = ArchiveDescriptor.placeholder_from_path("C:/maps/test.w3x")
        self.assertIn(b"Source archive path: C:/maps/test.w3x", d.entries[0].data)

    def test_from_path_with_reason(self):
        d = ArchiveDescriptor.placeholder_from_path("x.mpq", "unsupported")
        self.assertIn(b"Reason: unsupported", d.entries[0].data)

    def test_from_stream(self):
        d = ArchiveDescriptor.placeholder_from_stream(42)
        self.assertIn(b"Source archive provided via stream (42 bytes).", d.entries[0].data)


class TestStatInfo(unittest.TestCase):
    def test_for_directory(self):
        info = StatInfo.for_directory("scripts")
        self.assertEqual(info, StatInfo("scripts", 0, True))

    def test_for_entry_uses_basename(self):
        info = StatInfo.for_entry(ArchiveEntry("docs/readme.txt", b"abc"))
        self.assertEqual(info.display_name, "readme.txt")
        self.assertEqual(info.size, 3)
        self.assertFalse(info.is_container)
        self.assertEqual(info.content_type, "text/plain")

    def test_unknown_content_type(self):
        info = StatInfo.for_entry(ArchiveEntry("war3map.w3e", b""))
        self.assertEqual(info.content_type, "application/octet-stream")


class TestListChildren(unittest.TestCase):
    def setUp(self):
        self.d = ArchiveDescriptor.from_records([
            ("intro.txt", b"x" * 10),
            ("war3map.j", b"y" * 500),
            ("scripts/common.j", b"z" * 200),
        ])

    def test_root(self):
        listing = list_children(self.d, "")
        self.assertEqual(listing.directories, ("scripts",))
        self.assertEqual(listing.files, (0, 1))

    def test_subdirectory(self):
        listing = list_children(self.d, "scripts")
        self.assertEqual(listing.directories, ())
        self.assertEqual(listing.files, (2,))

    def test_deterministic(self):
        self.assertEqual(list_children(self.d, ""), list_children(self.d, ""))

    def test_unknown_prefix_is_empty(self):
        self.assertEqual(list_children(self.d, "missing"), ((), ()))

    def test_directories_sorted_case_insensitively(self):
        d = ArchiveDescriptor.from_records([
            ("zeta/a", b""),
            ("Alpha/b", b""),
            ("beta/c", b""),
        ])
        self.assertEqual(list_children(d, "").directories, ("Alpha", "beta", "zeta"))

    def test_directories_dedup_keeps_first_casing(self):
        d = ArchiveDescriptor.from_records([
            ("Units/a.slk", b""),
            ("UNITS/b.slk", b""),
            ("units\\c.slk", b""),
        ])
        listing = list_children(d, "")
        self.assertEqual(listing.directories, ("Units",))
        self.assertEqual(list_children(d, "units").files, (0, 1, 2))

    def test_files_keep_descriptor_order(self):
        d = ArchiveDescriptor.from_records([
            ("z.txt", b""),
            ("a.txt", b""),
            ("m.txt", b""),
        ])
        self.assertEqual(list_children(d, "").files, (0, 1, 2))

    def test_nested_prefix(self):
        d = ArchiveDescriptor.from_records([
            ("a/b/c.txt", b"1"),
            ("a/b/d/e.txt", b"22"),
            ("a/f.txt", b"333"),
        ])
        listing = list_children(d, "a/b")
        self.assertEqual(listing.directories, ("d",))
        self.assertEqual(listing.files, (0,))

    def test_find_directory(self):
        self.assertEqual(find_directory(self.d, "", "SCRIPTS"), "scripts")
        self.assertIsNone(find_directory(self.d, "", "intro.txt"))

    def test_subtree_size(self):
        self.assertEqual(subtree_size(self.d, ""), 710)
        self.assertEqual(subtree_size(self.d, "scripts"), 200)
        self.assertEqual(subtree_size(self.d, "Scripts"), 200)
        self.assertEqual(subtree_size(self.d, "missing"), 0)


if __name__ == "__main__":
    unittest.main()
