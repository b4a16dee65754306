import numpy as np
import numpy.typing as npt

IndexArray = npt.NDArray[np.intp]
