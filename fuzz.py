#!/usr/bin/env python3
"""
Random fuzzer for the editdata processor.
Generates malformed editor markup and checks that:
  - to_editable_form and to_storage_form never raise
  - unprotect_source(protect_source(html)) == html
  - protect_source is stable when applied twice
"""

import argparse
import random
import re
import string
import sys
import time
import traceback

TAGS = [
    "div", "span", "p", "a", "img", "table", "tr", "td", "th", "ul", "ol", "li",
    "form", "input", "select", "option", "textarea", "script", "style", "noscript",
    "head", "body", "html", "title", "meta", "link", "base", "br", "hr", "h1", "h2",
    "object", "embed", "param", "source", "area", "pre", "blockquote", "caption",
    "colgroup", "col", "thead", "tfoot", "tbody", "dl", "dt", "dd", "b", "i", "u",
]

BLOCK_TAGS = ["p", "div", "h1", "h2", "li", "td", "th", "pre", "blockquote", "dd"]

ATTRIBUTES = [
    "id", "class", "style", "href", "src", "alt", "title", "name", "value", "type",
    "onclick", "onload", "onerror", "contenteditable", "hidefocus", "width", "height",
    "data-cke-saved-href", "data-cke-saved-src", "data-cke-saved-name", "data-cke-pa-onclick",
    "data-cke-bogus", "data-cke-eol", "data-cke-bookmark", "data-cke-temp", "data-cke-editable",
]

CLASS_NAMES = ["cke_widget", "cke_focus", "Apple-style-span", "big", "x", ""]

MARKERS = [
    "<!--{cke_protected}%3Cb%3E-->",
    "<!--{cke_protected}{C}%3C!%2D%2D%20x%20%2D%2D%3E-->",
    "<!--{cke_temp}0-->",
    "<!--{cke_tempcomment}-->",
    "{cke_protected_1}",
    "{cke_protected_99}",
    "<cke:encoded>%3Cmeta%3E</cke:encoded>",
    "<cke:param name=x/>",
    "<cke:embed src=y>",
    "<?xml:namespace prefix=o>",
]

SPECIAL_TEXT = [
    "&nbsp;", "\xa0", "&amp;", "&lt;", "&", " ", "\n", "\r\n", "\t", "'", '"', "--", "%", "%2D",
    "\u200b", "\ufeff",
]


def random_string(min_len=0, max_len=12):
    """Generate random ASCII string."""
    length = random.randint(min_len, max_len)
    return "".join(random.choices(string.ascii_letters + string.digits, k=length))


def fuzz_attribute_value():
    choice = random.random()
    if choice < 0.2:
        return random.choice(CLASS_NAMES) + " " + random.choice(CLASS_NAMES)
    if choice < 0.35:
        return fuzz_comment()
    if choice < 0.45:
        return random.choice(MARKERS)
    if choice < 0.55:
        return "COLOR:red;FONT-SIZE:" + random_string(1, 3)
    return random_string(0, 10)


def fuzz_attribute():
    name = random.choice(ATTRIBUTES)
    value = fuzz_attribute_value().replace('"', "")
    quote = random.choice(['"', "'", ""])
    if not quote:
        return f"{name}={random_string(1, 6)}"
    if quote == "'":
        value = value.replace("'", "")
    return f"{name}={quote}{value}{quote}"


def fuzz_open_tag(tag=None):
    tag = tag or random.choice(TAGS)
    if random.random() < 0.1:
        tag = tag.upper()
    attrs = " ".join(fuzz_attribute() for _ in range(random.randint(0, 4)))
    closing = random.choice(["", "", "", "/", " /"])
    return f"<{tag}{' ' + attrs if attrs else ''}{closing}>"


def fuzz_close_tag(tag=None):
    return f"</{tag or random.choice(TAGS)}>"


def fuzz_comment():
    content = random.choice([random_string(), " keep me ", "", "-", "{cke_protected}", "<b>", "'quoted'"])
    if random.random() < 0.1:
        return f"<!--{content}"  # Unclosed
    return f"<!--{content}-->"


def fuzz_script():
    body = random.choice([random_string(), "if(a<b){}", "<!-- x -->", "</scr'+'ipt>", ""])
    closing = "</script>" if random.random() < 0.9 else ""
    return f"<script>{body}{closing}"


def fuzz_text():
    parts = []
    for _ in range(random.randint(1, 4)):
        if random.random() < 0.4:
            parts.append(random.choice(SPECIAL_TEXT))
        else:
            parts.append(random_string())
    return "".join(parts)


def fuzz_block():
    tag = random.choice(BLOCK_TAGS)
    inner = random.choice(
        [
            "",
            "<br>",
            "&nbsp;",
            fuzz_text(),
            fuzz_text() + "<br>",
            fuzz_text() + '<br data-cke-bogus="1">',
            fuzz_text() + "&nbsp;",
            "<br><br>",
            "<p>x</p><br><p>y</p>",
        ]
    )
    return f"<{tag}>{inner}</{tag}>"


def fuzz_table():
    sections = ["<caption>c</caption>", "<tbody><tr><td>1</td></tr></tbody>", "<thead><tr><th>h</th></tr></thead>",
                "<tfoot><tr><td>f</td></tr></tfoot>", "<colgroup><col></colgroup>", "<x-unknown></x-unknown>"]
    random.shuffle(sections)
    return "<table>" + "".join(sections[: random.randint(1, len(sections))]) + "</table>"


def fuzz_nested_structure(depth=0, max_depth=6):
    if depth >= max_depth or random.random() < 0.3:
        return fuzz_text()
    tag = random.choice(TAGS)
    children = "".join(fuzz_nested_structure(depth + 1, max_depth) for _ in range(random.randint(0, 3)))
    close = fuzz_close_tag(tag) if random.random() < 0.85 else ""
    return fuzz_open_tag(tag) + children + close


def generate_fuzzed_html():
    """Generate a random piece of editor markup."""
    strategies = [
        (fuzz_open_tag, 10),
        (fuzz_close_tag, 5),
        (fuzz_comment, 8),
        (fuzz_script, 4),
        (fuzz_text, 10),
        (fuzz_block, 12),
        (fuzz_table, 3),
        (fuzz_nested_structure, 6),
        (lambda: random.choice(MARKERS), 4),
        (lambda: "<pre>\n" + fuzz_text() + "</pre>", 2),
        (lambda: "<style>" + random_string() + "</style>", 2),
    ]
    funcs, weights = zip(*strategies)
    return "".join(random.choices(funcs, weights=weights)[0]() for _ in range(random.randint(1, 12)))


def check_case(html, protected_source):
    from editdata import DataStore, HtmlDataProcessor, ProcessorConfig, protect_source, unprotect_source

    store = DataStore()
    protected = protect_source(html, store, protected_source)
    restored = unprotect_source(protected, store)
    # Markers already present in the input are resolved, not kept.
    if "cke_" not in html:
        if restored != html:
            msg = f"protect_source round trip changed the markup: {restored[:200]!r}"
            raise AssertionError(msg)
        if protect_source(protected, store, protected_source) != protected:
            msg = "protect_source is not stable when applied twice"
            raise AssertionError(msg)

    processor = HtmlDataProcessor(ProcessorConfig(protected_source=protected_source))
    editable = processor.to_editable_form(html)
    processor.to_storage_form(editable)
    processor.to_editable_form(html, context=None)
    processor.to_editable_form(html, context="pre", fix_for_body=False)


def run_fuzzer(num_tests, seed=None, verbose=False, save_failures=False):
    if seed is not None:
        random.seed(seed)

    protected_source = (re.compile(r"<\?[\s\S]*?\?>"), re.compile(r"\[\[[^\]]*\]\]"))
    failures = []
    hangs = []
    successes = 0

    print(f"Fuzzing editdata with {num_tests} test cases...")
    start_time = time.time()

    for i in range(num_tests):
        html = generate_fuzzed_html()

        if verbose and i % 100 == 0:
            print(f"  Test {i}/{num_tests}...")

        try:
            start = time.perf_counter()
            check_case(html, protected_source)
            elapsed = time.perf_counter() - start

            # Check for hangs (>5 seconds)
            if elapsed > 5.0:
                hangs.append({"test_num": i, "html": html, "time": elapsed})
                if verbose:
                    print(f"  HANG: Test {i} took {elapsed:.2f}s")
            else:
                successes += 1

        except Exception as e:
            failures.append(
                {
                    "test_num": i,
                    "html": html,
                    "error": str(e),
                    "traceback": traceback.format_exc(),
                }
            )
            if verbose:
                print(f"  FAILURE: Test {i}: {e}")

    elapsed_total = time.time() - start_time

    print(f"\n{'=' * 60}")
    print("FUZZING RESULTS: editdata")
    print(f"{'=' * 60}")
    print(f"Total tests:    {num_tests}")
    print(f"Successes:      {successes}")
    print(f"Failures:       {len(failures)}")
    print(f"Hangs (>5s):    {len(hangs)}")
    print(f"Total time:     {elapsed_total:.2f}s")

    if failures:
        print(f"\n{'=' * 60}")
        print("FAILURE DETAILS:")
        print(f"{'=' * 60}")
        for failure in failures[:10]:  # Show first 10
            print(f"\nTest #{failure['test_num']}:")
            print(f"  HTML: {failure['html'][:200]!r}...")
            print(f"  Error: {failure['error']}")
        if len(failures) > 10:
            print(f"\n... and {len(failures) - 10} more failures")

    if save_failures and (failures or hangs):
        filename = f"fuzz_failures_editdata_{int(time.time())}.txt"
        with open(filename, "w") as f:
            f.write(f"Seed: {seed}\n\n")
            for failure in failures:
                f.write(f"=== FAILURE #{failure['test_num']} ===\n")
                f.write(f"HTML:\n{failure['html']}\n")
                f.write(f"Traceback:\n{failure['traceback']}\n\n")
            for hang in hangs:
                f.write(f"=== HANG #{hang['test_num']} ({hang['time']:.2f}s) ===\n")
                f.write(f"HTML:\n{hang['html']}\n\n")
        print(f"\nFailures saved to {filename}")

    return not failures and not hangs


def main():
    parser = argparse.ArgumentParser(description="Fuzz the editdata processor with malformed markup")
    parser.add_argument("--num-tests", "-n", type=int, default=1000, help="Number of test cases (default: 1000)")
    parser.add_argument("--seed", "-s", type=int, default=None, help="Random seed for reproducibility")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    parser.add_argument("--save-failures", action="store_true", help="Save failures to a file")
    parser.add_argument("--sample", type=int, metavar="N", help="Just print N sample fuzzed inputs")

    args = parser.parse_args()

    if args.sample:
        if args.seed:
            random.seed(args.seed)
        for i in range(args.sample):
            print(f"=== Sample {i + 1} ===")
            print(generate_fuzzed_html())
            print()
        return

    success = run_fuzzer(args.num_tests, seed=args.seed, verbose=args.verbose, save_failures=args.save_failures)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
