import unittest

from detection.models import ChangeType, NavLink, NavTextChange
from detection.navigation import NavLocator, diff_nav, extract_nav, find_locator

HOME = "https://www.hibbett.com/"

NAV_HTML = """
<html><head><title>Home</title></head><body>
  <header>
    <div id="navigation">
      <a href="/men">  Men's
         Shoes </a>
      <a href="https://www.hibbett.com/women">Women</a>
      <a href="https://www.instagram.com/hibbett">Instagram</a>
      <a href="mailto:help@hibbett.com">Email us</a>
      <a href="sale">Relative</a>
      <a href="/empty">   </a>
      <a>No href</a>
      <a href="/men">Men again</a>
    </div>
  </header>
  <footer><a href="/about">About</a></footer>
</body></html>
"""


class TestExtractNav(unittest.TestCase):

    def test_extracts_same_origin_links_from_container(self):
        links = extract_nav(NAV_HTML, HOME)
        self.assertEqual(links, [
            NavLink("https://www.hibbett.com/men", "Men's Shoes"),
            NavLink("https://www.hibbett.com/women", "Women"),
            NavLink("https://www.hibbett.com/men", "Men again"),
        ])

    def test_root_path_without_slash(self):
        self.assertEqual(len(extract_nav(NAV_HTML, "https://www.hibbett.com")), 3)

    def test_non_root_pages_are_skipped(self):
        self.assertEqual(extract_nav(NAV_HTML, "https://www.hibbett.com/products/123"), [])

    def test_relative_links_use_page_scheme(self):
        links = extract_nav(NAV_HTML, "http://www.hibbett.com/")
        self.assertEqual(links[0].url, "http://www.hibbett.com/men")

    def test_missing_container(self):
        html = "<html><body><nav><a href='/men'>Men</a></nav></body></html>"
        self.assertEqual(extract_nav(html, HOME), [])

    def test_site_family_locator(self):
        html = """
        <html><body>
          <div id="navigation"><a href="/ignored">Ignored</a></div>
          <div class="chakra-modal__body css-bkjnbb" id="chakra-modal--body-:r17:">
            <a href="/girls">Girls</a>
            <a href="https://www.kidshibbett.com/boys">Boys</a>
            <a href="https://www.hibbett.com/men">Other site</a>
          </div>
        </body></html>
        """
        links = extract_nav(html, "https://www.kidshibbett.com/")
        self.assertEqual(links, [
            NavLink("https://www.kidshibbett.com/girls", "Girls"),
            NavLink("https://www.kidshibbett.com/boys", "Boys"),
        ])

    def test_nested_containers_yield_each_anchor_once(self):
        html = """
        <html><body>
          <div class="chakra-modal__body">
            <a href="/girls">Girls</a>
            <div class="chakra-modal__body">
              <a href="/boys">Boys</a>
              <a href="/boys">Boys</a>
            </div>
          </div>
        </body></html>
        """
        links = extract_nav(html, "https://www.kidshibbett.com/")
        self.assertEqual(links, [
            NavLink("https://www.kidshibbett.com/girls", "Girls"),
            NavLink("https://www.kidshibbett.com/boys", "Boys"),
            NavLink("https://www.kidshibbett.com/boys", "Boys"),
        ])

    def test_custom_locator_table_without_catch_all(self):
        table = (NavLocator("example.org", "nav.main"),)
        html = "<html><body><nav class='main'><a href='/a'>A</a></nav></body></html>"

        self.assertEqual(extract_nav(html, "https://shop.example.org/", table),
                         [NavLink("https://shop.example.org/a", "A")])
        self.assertEqual(extract_nav(html, "https://www.example.com/", table), [])

    def test_find_locator_matches_subdomains_via_registered_domain(self):
        self.assertEqual(find_locator("www.kidshibbett.com").selector, ".chakra-modal__body")
        self.assertEqual(find_locator("KIDSHIBBETT.COM").selector, ".chakra-modal__body")
        self.assertEqual(find_locator("www.hibbett.com").selector, "#navigation")


class TestDiffNav(unittest.TestCase):

    def test_disjoint_sets_are_removed_and_added(self):
        changes = diff_nav([NavLink("a", "A")], [NavLink("b", "B")])

        self.assertEqual([c.type for c in changes], [ChangeType.NAV_REMOVED, ChangeType.NAV_ADDED])
        self.assertEqual(changes[0].links, (NavLink("a", "A"),))
        self.assertEqual(changes[1].links, (NavLink("b", "B"),))

    def test_text_change(self):
        changes = diff_nav([NavLink("a", "Sale")], [NavLink("a", "Clearance")])
        self.assertEqual(len(changes), 1)
        self.assertEqual(changes[0].type, ChangeType.NAV_TEXT_CHANGED)
        self.assertEqual(changes[0].links, (NavTextChange("a", "Sale", "Clearance"),))

    def test_order_removed_added_text_changed(self):
        old = [NavLink("a", "A"), NavLink("c", "C")]
        new = [NavLink("c", "C2"), NavLink("b", "B")]
        changes = diff_nav(old, new)
        self.assertEqual([c.type for c in changes],
                         [ChangeType.NAV_REMOVED, ChangeType.NAV_ADDED, ChangeType.NAV_TEXT_CHANGED])

    def test_duplicate_urls_last_text_wins(self):
        old = [NavLink("a", "First"), NavLink("a", "Second")]
        self.assertEqual(diff_nav(old, [NavLink("a", "Second")]), [])

    def test_identical_or_empty(self):
        links = [NavLink("a", "A"), NavLink("b", "B")]
        self.assertEqual(diff_nav(links, list(links)), [])
        self.assertEqual(diff_nav([], []), [])


if __name__ == "__main__":
    unittest.main()
