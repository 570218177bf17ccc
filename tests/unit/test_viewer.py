"""Unit tests for the image viewer carousel."""

from coloria.library.viewer import KEY_CLOSE, KEY_NEXT, KEY_PREV, ImageViewer


class TestOpenClose:
    def test_open_in_range(self):
        viewer = ImageViewer()
        assert viewer.open(2, 5)
        assert viewer.is_open
        assert viewer.cursor == 2

    def test_open_out_of_range_is_ignored(self):
        viewer = ImageViewer()
        assert not viewer.open(5, 5)
        assert not viewer.open(-1, 5)
        assert not viewer.open(0, 0)
        assert not viewer.is_open

    def test_close(self):
        viewer = ImageViewer()
        viewer.open(1, 5)
        viewer.close()
        assert not viewer.is_open

    def test_current(self, sample_records):
        viewer = ImageViewer()
        viewer.open(1, len(sample_records))
        assert viewer.current(sample_records).id == "img-4"
        assert viewer.current([]) is None


class TestNavigation:
    """Five records, page size 2: pages are [0,1] [2,3] [4]."""

    def test_next_across_page_boundary(self):
        viewer = ImageViewer()
        viewer.open(1, 5)

        page = viewer.navigate_next(5, 2, 1)

        assert viewer.cursor == 2
        assert page == 2

    def test_next_within_page(self):
        viewer = ImageViewer()
        viewer.open(2, 5)

        page = viewer.navigate_next(5, 2, 2)

        assert viewer.cursor == 3
        assert page == 2

    def test_prev_across_page_boundary(self):
        viewer = ImageViewer()
        viewer.open(2, 5)

        page = viewer.navigate_prev(5, 2, 2)

        assert viewer.cursor == 1
        assert page == 1

    def test_prev_within_page(self):
        viewer = ImageViewer()
        viewer.open(3, 5)

        page = viewer.navigate_prev(5, 2, 2)

        assert viewer.cursor == 2
        assert page == 2

    def test_next_at_end_is_noop(self):
        viewer = ImageViewer()
        viewer.open(4, 5)

        page = viewer.navigate_next(5, 2, 3)

        assert viewer.cursor == 4
        assert page == 3
        assert not viewer.has_next(5)

    def test_prev_at_start_is_noop(self):
        viewer = ImageViewer()
        viewer.open(0, 5)

        page = viewer.navigate_prev(5, 2, 1)

        assert viewer.cursor == 0
        assert page == 1
        assert not viewer.has_prev(5)

    def test_navigation_on_empty_sequence_never_raises(self):
        viewer = ImageViewer(is_open=True, cursor=3)

        assert viewer.navigate_next(0, 2, 1) == 1
        assert viewer.navigate_prev(0, 2, 1) == 1
        assert viewer.cursor == 3

    def test_walk_forward_visits_every_page(self):
        viewer = ImageViewer()
        viewer.open(0, 5)
        page = 1
        pages = [page]
        for _ in range(4):
            page = viewer.navigate_next(5, 2, page)
            pages.append(page)

        assert pages == [1, 1, 2, 2, 3]
        assert viewer.cursor == 4


class TestKeys:
    def test_keys_ignored_while_closed(self):
        viewer = ImageViewer()
        assert viewer.handle_key(KEY_NEXT, 5, 2, 1) == 1
        assert viewer.cursor == 0

    def test_escape_closes(self):
        viewer = ImageViewer()
        viewer.open(1, 5)
        viewer.handle_key(KEY_CLOSE, 5, 2, 1)
        assert not viewer.is_open

    def test_arrows_navigate(self):
        viewer = ImageViewer()
        viewer.open(1, 5)

        assert viewer.handle_key(KEY_NEXT, 5, 2, 1) == 2
        assert viewer.cursor == 2
        assert viewer.handle_key(KEY_PREV, 5, 2, 2) == 1
        assert viewer.cursor == 1

    def test_other_keys_ignored(self):
        viewer = ImageViewer()
        viewer.open(1, 5)
        assert viewer.handle_key("Enter", 5, 2, 1) == 1
        assert viewer.is_open
        assert viewer.cursor == 1
