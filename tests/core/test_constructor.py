"""
Tests for constructor dependency injection.

Covers constructor synthesis, extension of existing single-line and
multi-line parameter lists, optional and promoted parameters, and the
malformed targets that must stop processing.
"""

import pytest

from mage_migrate.core.constructor import ConstructorHelper
from mage_migrate.core.errors import InjectionError
from mage_migrate.core.mage.requirements import DiVariable
from mage_migrate.core.token_stream import TokenStream

LOGGER = DiVariable("logger", "\\Psr\\Log\\LoggerInterface")
REGISTRY = DiVariable("registry", "\\Magento\\Framework\\Registry")


def inject(code, *variables):
  stream = TokenStream.from_source(code)
  ConstructorHelper().set_context(stream).inject_arguments({v.name: v for v in variables})
  return stream.render()


def test_synthesises_constructor():
  code = "<?php\nclass A\n{\n    public function run()\n    {\n    }\n}\n"

  assert inject(code, LOGGER) == (
    "<?php\n"
    "class A\n"
    "{\n"
    "    /**\n"
    "     * @var \\Psr\\Log\\LoggerInterface\n"
    "     */\n"
    "    protected $logger;\n"
    "\n"
    "    public function __construct(\n"
    "        \\Psr\\Log\\LoggerInterface $logger\n"
    "    ) {\n"
    "        $this->logger = $logger;\n"
    "    }\n"
    "\n"
    "    public function run()\n"
    "    {\n"
    "    }\n"
    "}\n"
  )


def test_extends_single_line_constructor():
  code = (
    "<?php\n"
    "class A\n"
    "{\n"
    "    protected $foo;\n"
    "\n"
    "    public function __construct(Foo $foo)\n"
    "    {\n"
    "        $this->foo = $foo;\n"
    "    }\n"
    "}\n"
  )

  assert inject(code, LOGGER) == (
    "<?php\n"
    "class A\n"
    "{\n"
    "    /**\n"
    "     * @var \\Psr\\Log\\LoggerInterface\n"
    "     */\n"
    "    protected $logger;\n"
    "\n"
    "    protected $foo;\n"
    "\n"
    "    public function __construct(Foo $foo, \\Psr\\Log\\LoggerInterface $logger)\n"
    "    {\n"
    "        $this->foo = $foo;\n"
    "        $this->logger = $logger;\n"
    "    }\n"
    "}\n"
  )


def test_new_parameters_precede_optional_ones():
  code = (
    "<?php\n"
    "class A extends B\n"
    "{\n"
    "    public function __construct(\n"
    "        Foo $foo,\n"
    "        array $data = []\n"
    "    ) {\n"
    "        parent::__construct($data);\n"
    "    }\n"
    "}\n"
  )

  out = inject(code, LOGGER)

  assert (
    "        Foo $foo,\n"
    "        \\Psr\\Log\\LoggerInterface $logger,\n"
    "        array $data = []\n"
    "    ) {\n"
    "        parent::__construct($data);\n"
    "        $this->logger = $logger;\n"
    "    }\n"
  ) in out


def test_trailing_comma_is_respected():
  code = "<?php\nclass A\n{\n    public function __construct(\n        Foo $foo,\n    ) {\n    }\n}\n"

  out = inject(code, LOGGER)

  assert "        Foo $foo,\n        \\Psr\\Log\\LoggerInterface $logger,\n    ) {\n" in out


def test_promoted_parameters_are_left_alone():
  code = (
    "<?php\n"
    "class A\n"
    "{\n"
    "    public function __construct(private \\Psr\\Log\\LoggerInterface $logger)\n"
    "    {\n"
    "    }\n"
    "}\n"
  )

  out = inject(code, LOGGER, REGISTRY)

  assert "__construct(private \\Psr\\Log\\LoggerInterface $logger, \\Magento\\Framework\\Registry $registry)" in out
  assert "    {\n        $this->registry = $registry;\n    }\n" in out
  assert "protected $registry;" in out
  assert "protected $logger;" not in out
  assert "$this->logger = $logger;" not in out


def test_injection_is_idempotent():
  code = "<?php\nclass A\n{\n    public function run()\n    {\n    }\n}\n"
  once = inject(code, LOGGER, REGISTRY)
  assert inject(once, LOGGER, REGISTRY) == once


def test_only_class_members_are_inspected():
  code = (
    "<?php\n"
    "class A\n"
    "{\n"
    "    public function run()\n"
    "    {\n"
    "        $f = function () { return 1; };\n"
    "        $logger = null;\n"
    "    }\n"
    "}\n"
  )

  out = inject(code, LOGGER)

  assert out.count("function __construct(") == 1
  assert "protected $logger;" in out


def test_empty_requirements_leave_stream_untouched():
  code = "<?php\nclass A {}\n"
  assert inject(code) == code


def test_abstract_constructor_raises():
  code = "<?php\nabstract class A\n{\n    abstract public function __construct(Foo $foo);\n}\n"
  with pytest.raises(InjectionError, match="no body"):
    inject(code, LOGGER)


def test_missing_class_raises():
  with pytest.raises(InjectionError, match="No class declaration"):
    inject("<?php\ninterface I\n{\n}\n", LOGGER)


def test_unclosed_class_raises():
  with pytest.raises(InjectionError, match="not closed"):
    inject("<?php\nclass A\n{\n    public function run() {}\n", LOGGER)


def test_context_is_required():
  with pytest.raises(InjectionError, match="set_context"):
    ConstructorHelper().inject_arguments({"logger": LOGGER})
