class Mesh:
    """
    Base class for meshes.

    Abstract interface for node containers consumed by node graphs and DOF
    assignment. A mesh owns its nodes; every other component refers to them
    by global id or holds non-owning references.

    Notes
    -----
    Subclasses must provide:
    - dimensions: number of parametric axes
    - total_nodes: all nodes in total order
    - internal_nodes: nodes strictly inside the domain
    - boundary_nodes: mapping Position -> nodes on that face
    - parametric_index: mapping parametric key -> node
    """
    def __init__(self):
        pass

    @property
    def dimensions(self):
        raise NotImplementedError("dimensions must be implemented in subclasses.")

    @property
    def total_nodes(self):
        raise NotImplementedError("total_nodes must be implemented in subclasses.")

    @property
    def internal_nodes(self):
        raise NotImplementedError("internal_nodes must be implemented in subclasses.")

    @property
    def boundary_nodes(self):
        raise NotImplementedError("boundary_nodes must be implemented in subclasses.")

    @property
    def parametric_index(self):
        raise NotImplementedError("parametric_index must be implemented in subclasses.")

    def node(self, *indices):
        raise NotImplementedError("node must be implemented in subclasses.")

    def normal_unit_vector(self, position, node):
        raise NotImplementedError("normal_unit_vector must be implemented in subclasses.")

    def ghost_mesh(self, depth):
        raise NotImplementedError("ghost_mesh must be implemented in subclasses.")
