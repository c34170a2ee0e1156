import os
import sys

import pytest

# Add the project root to sys.path so that rtlcraft is importable
# This is needed because of the flat layout structure
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
if project_root not in sys.path:
    sys.path.insert(0, project_root)


COUNTER_V = """\
// 8-bit counter with synchronous enable
module counter #(parameter WIDTH = 8) (
    input clk,
    input rst_n,
    input enable,
    output reg [WIDTH-1:0] count
);
    always @(posedge clk or negedge rst_n) begin
        if (!rst_n)
            count <= 0;
        else if (enable)
            count <= count + 1;
    end
endmodule
"""


@pytest.fixture
def counter_source():
    """Well-formed parameterized counter."""
    return COUNTER_V
