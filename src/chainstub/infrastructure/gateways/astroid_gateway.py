import builtins
from pathlib import Path
from typing import Optional, Union

import astroid  # type: ignore[import-untyped]

from chainstub.domain.constants import CREATE_MOCK, MOCKING_MODULE, OPTIONAL_WRAPPER
from chainstub.domain.entities import TypeRef

_SELF_NAMES: frozenset[str] = frozenset({"self", "cls"})
_NONE_QNAMES: frozenset[str] = frozenset({"builtins.NoneType", "NoneType", "None", "builtins.None"})
_STATIC_KINDS: frozenset[str] = frozenset({"staticmethod", "classmethod"})
_GENERIC_ALIASES: dict[str, str] = {
    "List": "list",
    "Dict": "dict",
    "Set": "set",
    "FrozenSet": "frozenset",
    "Tuple": "tuple",
    "list": "list",
    "dict": "dict",
    "set": "set",
    "frozenset": "frozenset",
    "tuple": "tuple",
}


class AstroidGateway:
    """
    Type intelligence for call chains: result types, static-ness and
    constructor/mock detection, driven by annotations first and astroid
    inference second.
    """

    def __init__(self) -> None:
        self._classes: dict[str, astroid.nodes.ClassDef] = {}

    def clear_inference_cache(self) -> None:
        """Clear the astroid inference cache to force fresh inference after code changes."""
        astroid.MANAGER.clear_cache()
        self._classes.clear()

    def parse_source(self, source: str, file_path: str) -> astroid.nodes.Module:
        """Parse source into an astroid Module named after the file stem."""
        return astroid.parse(source, module_name=Path(file_path).stem, path=file_path)

    # -- TypeRef construction --------------------------------------------------

    def type_of(self, node: astroid.nodes.NodeNG) -> Optional[TypeRef]:
        qname = self.get_node_return_type_qname(node)
        return self.to_type_ref(qname)

    def annotation_type(self, annotation: Optional[astroid.nodes.NodeNG]) -> Optional[TypeRef]:
        if annotation is None:
            return None
        return self.to_type_ref(self._resolve_annotation(annotation))

    def to_type_ref(self, qname: Optional[str]) -> Optional[TypeRef]:
        if not qname or qname in _NONE_QNAMES:
            return None
        canonical = self.canonical_type_name(qname)
        return TypeRef(canonical_name=canonical, simple_name=self.simple_type_name(canonical))

    @staticmethod
    def canonical_type_name(qname: str) -> str:
        """Builtins are written bare (`int`, `str`); everything else keeps its dotted qname."""
        name = qname.lstrip(".")
        if name.startswith("builtins."):
            return name[len("builtins."):]
        return name

    @staticmethod
    def simple_type_name(qname: str) -> str:
        return qname.rsplit(".", 1)[-1]

    # -- Call classification -------------------------------------------------

    def is_constructor_call(self, node: astroid.nodes.Call) -> bool:
        """True when the callee is a class, i.e. the call builds a fresh value."""
        try:
            for inf in node.func.infer():
                if isinstance(inf, astroid.nodes.ClassDef):
                    self._remember(inf)
                    return True
                if inf is not astroid.Uninferable:
                    return False
        except (astroid.InferenceError, AttributeError):
            pass
        return False

    def is_static_method(self, node: astroid.nodes.Call) -> bool:
        """
        Static calls cannot be stubbed on an instance: staticmethods,
        classmethods, module-level functions, and bare-name calls.
        """
        func = node.func
        if not isinstance(func, astroid.nodes.Attribute):
            return True
        try:
            for inf in func.infer():
                function = self._as_function(inf)
                if function is None:
                    continue
                if function.type in _STATIC_KINDS:
                    return True
                return isinstance(function.parent, astroid.nodes.Module)
        except (astroid.InferenceError, AttributeError):
            pass
        return self._is_class_or_module(func.expr)

    def is_mock_creation(self, node: astroid.nodes.Call) -> bool:
        """True for the mocking library's own `mock(...)` call."""
        func = node.func
        if isinstance(func, astroid.nodes.Name):
            name, qualifier = func.name, None
        elif isinstance(func, astroid.nodes.Attribute):
            name, qualifier = func.attrname, func.expr.as_string()
        else:
            return False
        if name != CREATE_MOCK:
            return False
        try:
            for inf in func.infer():
                if inf is astroid.Uninferable:
                    continue
                qname = str(getattr(inf, "qname", lambda: "")())
                if qname:
                    return qname.split(".")[0] == MOCKING_MODULE
        except (astroid.InferenceError, AttributeError):
            pass
        return qualifier is None or qualifier == MOCKING_MODULE

    # -- Result type discovery -----------------------------------------------

    def get_node_return_type_qname(self, node: astroid.nodes.NodeNG) -> Optional[str]:
        """Qualified name of the value an expression evaluates to, or None."""
        if isinstance(node, astroid.nodes.Call):
            res = self._discover_from_call(node)
            if res:
                return res
        elif isinstance(node, (astroid.nodes.Name, astroid.nodes.AssignName)):
            res = self._discover_from_name(node)
            if res:
                return res
        elif isinstance(node, astroid.nodes.Attribute):
            res = self._discover_from_attribute(node)
            if res:
                return res
        return self._infer_value_type(node)

    def _discover_from_call(self, node: astroid.nodes.Call) -> Optional[str]:
        """Constructor class, else the callee's return annotation, else a lookup on the receiver type."""
        try:
            for inf in node.func.infer():
                if isinstance(inf, astroid.nodes.ClassDef):
                    self._remember(inf)
                    return str(inf.qname())
                function = self._as_function(inf)
                if function is not None and function.returns:
                    return self._resolve_annotation(function.returns)
        except (astroid.InferenceError, AttributeError):
            pass

        if isinstance(node.func, astroid.nodes.Attribute):
            receiver_type = self.get_node_return_type_qname(node.func.expr)
            if receiver_type:
                return self._find_method_in_class_hierarchy(receiver_type, node.func.attrname, node)
        return None

    def _discover_from_name(self, node: Union[astroid.nodes.Name, astroid.nodes.AssignName]) -> Optional[str]:
        """Annotated assignment or annotated parameter that binds the name."""
        try:
            _, def_nodes = node.lookup(node.name)
        except AttributeError:
            return None
        for def_node in def_nodes:
            parent = getattr(def_node, "parent", None)
            if isinstance(parent, astroid.nodes.AnnAssign) and parent.annotation:
                return self._resolve_annotation(parent.annotation)
            if isinstance(parent, astroid.nodes.Arguments):
                res = self._resolve_arg_annotation(def_node, parent)
                if res:
                    return res
        return None

    def _resolve_arg_annotation(self, def_node: astroid.nodes.NodeNG, args: astroid.nodes.Arguments) -> Optional[str]:
        """Annotation of one parameter, matched by position across every parameter kind."""
        try:
            all_args = (args.posonlyargs or []) + (args.args or []) + (args.kwonlyargs or [])
            all_annos = (
                (args.posonlyargs_annotations or [])
                + (args.annotations or [])
                + (args.kwonlyargs_annotations or [])
            )
            idx = all_args.index(def_node)
            if idx < len(all_annos) and all_annos[idx] is not None:
                return self._resolve_annotation(all_annos[idx])
        except (ValueError, AttributeError):
            pass
        return None

    def _discover_from_attribute(self, node: astroid.nodes.Attribute) -> Optional[str]:
        """receiver.attr: annotated class attribute or @property on the receiver's class."""
        receiver_type = self.get_node_return_type_qname(node.expr)
        if not receiver_type:
            return None
        class_node = self._find_class_node(receiver_type, node)
        if class_node is None:
            return None
        return self._resolve_attribute_in_node(class_node, node.attrname)

    def _resolve_attribute_in_node(self, class_node: astroid.nodes.ClassDef, attr_name: str) -> Optional[str]:
        for n in class_node.body:
            if isinstance(n, astroid.nodes.AnnAssign) and n.annotation:
                if getattr(n.target, "name", None) == attr_name:
                    return self._resolve_annotation(n.annotation)
            if isinstance(n, astroid.nodes.FunctionDef) and n.name == attr_name and n.returns:
                decorators = getattr(getattr(n, "decorators", None), "nodes", None) or []
                if any(isinstance(d, astroid.nodes.Name) and d.name == "property" for d in decorators):
                    return self._resolve_annotation(n.returns)
        try:
            for ancestor in class_node.ancestors():
                res = self._resolve_attribute_in_node(ancestor, attr_name)
                if res:
                    return res
        except astroid.InferenceError:
            pass
        return None

    def _infer_value_type(self, node: astroid.nodes.NodeNG) -> Optional[str]:
        """True inference: the class of the first inferred value."""
        try:
            for inf in node.infer():
                if inf is astroid.Uninferable:
                    continue
                if isinstance(inf, astroid.nodes.Const) and inf.value is None:
                    continue
                if isinstance(inf, astroid.Instance):
                    self._remember(inf._proxied)
                qname = str(inf.pytype())
                if qname:
                    return self._normalize_primitive(qname)
        except (astroid.InferenceError, AttributeError):
            pass
        return None

    def _find_method_in_class_hierarchy(
        self,
        class_qname: str,
        method_name: str,
        context: astroid.nodes.NodeNG,
    ) -> Optional[str]:
        class_node = self._find_class_node(class_qname, context)
        if class_node is None:
            return None
        return self._resolve_method_in_node(class_node, method_name)

    def _resolve_method_in_node(self, class_node: astroid.nodes.ClassDef, method_name: str) -> Optional[str]:
        """Return annotation of the method, searching the class then its ancestors."""
        for method in class_node.mymethods():
            if method.name == method_name and method.returns:
                return self._resolve_annotation(method.returns)
        try:
            for ancestor in class_node.ancestors():
                for method in ancestor.mymethods():
                    if method.name == method_name and method.returns:
                        return self._resolve_annotation(method.returns)
        except astroid.InferenceError:
            pass
        return None

    def _find_class_node(self, qname: str, context: astroid.nodes.NodeNG) -> Optional[astroid.nodes.ClassDef]:
        """Find a ClassDef by qname: classes seen this session, then the local module, then absolute import."""
        if qname in self._classes:
            return self._classes[qname]
        root = context.root()
        root_name = getattr(root, "name", "")

        clean_name = qname.lstrip(".")
        if root_name and clean_name.startswith(root_name + "."):
            clean_name = clean_name[len(root_name) + 1:]
        if "." not in clean_name:
            _, stmts = root.lookup(clean_name)
            if stmts and isinstance(stmts[0], astroid.nodes.ClassDef):
                return self._remember(stmts[0])

        module_name, _, class_name = qname.rpartition(".")
        try:
            module = astroid.MANAGER.ast_from_module_name(module_name or "builtins")
            _, stmts = module.lookup(class_name)
            if stmts and isinstance(stmts[0], astroid.nodes.ClassDef):
                return self._remember(stmts[0])
        except (astroid.AstroidBuildingError, AttributeError):
            pass
        return None

    # -- Annotations ---------------------------------------------------------

    def _resolve_annotation(self, anno: astroid.nodes.NodeNG) -> Optional[str]:
        """Resolve a type annotation node to its fully qualified name."""
        if isinstance(anno, astroid.nodes.Subscript):
            return self._resolve_subscript_annotation(anno)
        if isinstance(anno, astroid.nodes.BinOp) and anno.op == "|":
            return self._resolve_nested_annotation(anno)
        return self._resolve_simple_annotation(anno)

    def _resolve_subscript_annotation(self, anno: astroid.nodes.Subscript) -> Optional[str]:
        """`Optional[T]` keeps its wrapper; `Union[...]` resolves to its first non-None member."""
        written = self._written_name(anno.value)
        if written == OPTIONAL_WRAPPER:
            return f"typing.{OPTIONAL_WRAPPER}"
        if written == "Union":
            return self._resolve_nested_annotation(anno.slice)
        if written in _GENERIC_ALIASES:
            return f"builtins.{_GENERIC_ALIASES[written]}"
        try:
            for inf in anno.value.infer():
                if isinstance(inf, astroid.nodes.ClassDef):
                    self._remember(inf)
                    return self._normalize_primitive(str(inf.qname()))
        except (astroid.InferenceError, AttributeError):
            pass
        return None

    def _resolve_simple_annotation(self, anno: astroid.nodes.NodeNG) -> Optional[str]:
        """Resolve terminal annotation nodes (Name, Attribute, string constants)."""
        if isinstance(anno, astroid.nodes.Const) and isinstance(anno.value, str):
            return self._resolve_string_annotation(anno)
        if isinstance(anno, astroid.nodes.Const) and anno.value is None:
            return None
        try:
            for inf in anno.infer():
                if isinstance(inf, astroid.nodes.ClassDef):
                    self._remember(inf)
                    return self._normalize_primitive(str(inf.qname()))
                if inf is not astroid.Uninferable and hasattr(inf, "qname"):
                    return self._normalize_primitive(str(inf.qname()))
        except (astroid.InferenceError, AttributeError):
            pass
        if isinstance(anno, astroid.nodes.Name):
            return self._normalize_primitive(anno.name)
        if isinstance(anno, astroid.nodes.Attribute):
            return anno.as_string()
        return None

    def _resolve_string_annotation(self, anno: astroid.nodes.Const) -> Optional[str]:
        """Forward references such as `-> "User"`: look the name up from the annotation's scope."""
        value = anno.value.strip()
        if value.isidentifier():
            try:
                _, stmts = anno.scope().lookup(value)
                for stmt in stmts:
                    if isinstance(stmt, astroid.nodes.ClassDef):
                        self._remember(stmt)
                        return str(stmt.qname())
                    for inf in stmt.infer():
                        if isinstance(inf, astroid.nodes.ClassDef):
                            self._remember(inf)
                            return str(inf.qname())
            except (astroid.InferenceError, AttributeError):
                pass
        return self._normalize_primitive(value)

    def _resolve_nested_annotation(self, slice_node: astroid.nodes.NodeNG) -> Optional[str]:
        """First member of a union that is not None."""
        if isinstance(slice_node, (astroid.nodes.Tuple, astroid.nodes.List)):
            members = list(slice_node.elts)
        elif isinstance(slice_node, astroid.nodes.BinOp) and slice_node.op == "|":
            members = [slice_node.left, slice_node.right]
        else:
            members = [slice_node]
        for member in members:
            res = self._resolve_annotation(member)
            if res and res not in _NONE_QNAMES:
                return res
        return None

    # -- Helpers -------------------------------------------------------------

    @staticmethod
    def _normalize_primitive(qname: str) -> str:
        """Normalize bare builtin type names like 'str' to 'builtins.str'."""
        if "." not in qname and isinstance(getattr(builtins, qname, None), type):
            return f"builtins.{qname}"
        return qname

    @staticmethod
    def _written_name(node: astroid.nodes.NodeNG) -> str:
        if isinstance(node, astroid.nodes.Name):
            return str(node.name)
        if isinstance(node, astroid.nodes.Attribute):
            return str(node.attrname)
        return ""

    @staticmethod
    def _as_function(inf: object) -> Optional[astroid.nodes.FunctionDef]:
        """Unwrap bound/unbound methods to their FunctionDef."""
        if isinstance(inf, astroid.nodes.FunctionDef):
            return inf
        if isinstance(inf, (astroid.BoundMethod, astroid.UnboundMethod)):
            proxied = getattr(inf, "_proxied", None)
            if isinstance(proxied, astroid.nodes.FunctionDef):
                return proxied
        return None

    @staticmethod
    def _is_class_or_module(node: astroid.nodes.NodeNG) -> bool:
        try:
            for inf in node.infer():
                if isinstance(inf, (astroid.nodes.ClassDef, astroid.nodes.Module)):
                    return True
                if inf is not astroid.Uninferable:
                    return False
        except (astroid.InferenceError, AttributeError):
            pass
        return False

    def _remember(self, class_node: astroid.nodes.ClassDef) -> astroid.nodes.ClassDef:
        self._classes[str(class_node.qname())] = class_node
        return class_node

    @staticmethod
    def reference_name(node: astroid.nodes.NodeNG) -> Optional[str]:
        """Name of a plain reference (`repo`, `self.repo` -> `repo`); None for self/cls and non-references."""
        if isinstance(node, astroid.nodes.Name):
            return None if node.name in _SELF_NAMES else str(node.name)
        if isinstance(node, astroid.nodes.Attribute):
            return str(node.attrname)
        return None
